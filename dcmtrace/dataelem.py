# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Define the element header produced for each data element read."""

from typing import NamedTuple

from dcmtrace.tag import BaseTag


# VRs that are followed by 2 reserved bytes and a 4-byte length in
#   explicit VR encodings
extra_length_VRs = (
    'OB', 'OW', 'SQ', 'UN', 'UT', 'OF', 'OL', 'OV', 'UC', 'UR'
)

UNDEFINED_LENGTH = 0xFFFFFFFF


class ElementHeader(NamedTuple):
    """The decoded header of a single data element.

    Attributes
    ----------
    tag : BaseTag
        The element's (group, element) tag.
    VR : str
        The two character VR, or ``''`` if the header was read in implicit
        form.
    length : int
        The value length in bytes, ``0`` if `is_undefined_length`.
    value_tell : int
        The absolute file offset of the first value byte.
    is_undefined_length : bool
        ``True`` if the length field was ``0xFFFFFFFF``.
    """
    tag: BaseTag
    VR: str
    length: int
    value_tell: int
    is_undefined_length: bool

    @property
    def value_end(self) -> int:
        """Return the offset just past the value (defined length only)."""
        return self.value_tell + self.length

    @property
    def length_str(self) -> str:
        """Return the length as shown in the trace."""
        if self.is_undefined_length:
            return "undefined"

        return str(self.length)
