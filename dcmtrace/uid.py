# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Functions for handling DICOM unique identifiers (UIDs) and the transfer
syntaxes they select.
"""

from enum import Enum
from typing import Type, TypeVar, Union


_UID = TypeVar("_UID", bound="UID")


class UID(str):
    """Human friendly UIDs as a Python :class:`str` subclass.

    Trailing space and NULL padding is removed on creation.

    Examples
    --------

    >>> from dcmtrace.uid import UID, ImplicitVRLittleEndian
    >>> uid = UID('1.2.840.10008.1.2\\x00')
    >>> uid
    '1.2.840.10008.1.2'
    >>> uid == ImplicitVRLittleEndian
    True
    """
    def __new__(cls: Type[_UID], val: str) -> _UID:
        if isinstance(val, str):
            return super().__new__(cls, val.strip(' \x00'))

        raise TypeError("A UID must be created from a string")


ImplicitVRLittleEndian = UID('1.2.840.10008.1.2')
"""1.2.840.10008.1.2"""
ExplicitVRLittleEndian = UID('1.2.840.10008.1.2.1')
"""1.2.840.10008.1.2.1"""
ExplicitVRBigEndian = UID('1.2.840.10008.1.2.2')
"""1.2.840.10008.1.2.2"""


class TransferSyntax(Enum):
    """The encodings a dataset may be read with."""
    ImplicitVRLittleEndian = "Implicit VR Little Endian"
    ExplicitVRLittleEndian = "Explicit VR Little Endian"
    ExplicitVRBigEndian = "Explicit VR Big Endian"
    Unknown = "Unknown/Default Explicit LE"

    @classmethod
    def from_uid(cls, uid: Union[None, str, bytes]) -> "TransferSyntax":
        """Return the transfer syntax selected by `uid`.

        Any UID other than the three uncompressed ones, including an empty
        or missing UID, gives :attr:`Unknown`, which is read as Explicit VR
        Little Endian.
        """
        if uid is None:
            return cls.Unknown

        if isinstance(uid, bytes):
            uid = uid.decode('ascii', 'replace')

        uid = UID(uid)
        if uid == ImplicitVRLittleEndian:
            return cls.ImplicitVRLittleEndian
        if uid == ExplicitVRLittleEndian:
            return cls.ExplicitVRLittleEndian
        if uid == ExplicitVRBigEndian:
            return cls.ExplicitVRBigEndian

        return cls.Unknown

    @property
    def is_implicit_VR(self) -> bool:
        return self is TransferSyntax.ImplicitVRLittleEndian

    @property
    def is_little_endian(self) -> bool:
        return self is not TransferSyntax.ExplicitVRBigEndian

    @property
    def description(self) -> str:
        """Return the text shown in the ``[INFO] Transfer Syntax`` line."""
        return self.value
