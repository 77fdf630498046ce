# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Capture of the image description and output of the *Pixel Data* as a
binary (P5) portable graymap.

The *Pixel Data* bytes are written as found in the file: nothing is
decompressed, rescaled or byte swapped.
"""

import os
from typing import Optional, Union

from dcmtrace import config
from dcmtrace.config import logger
from dcmtrace.misc import warn_and_log


PathType = Union[str, "os.PathLike[str]"]


class ImageDescriptor:
    """The image description gathered while walking a dataset.

    One instance lives for exactly one walk; the reader fills it in as the
    *Rows*, *Columns*, *Bits Allocated* and *Photometric Interpretation*
    elements go past.
    """
    def __init__(self) -> None:
        self.rows = 0
        self.columns = 0
        self.bits_allocated = 0
        self.photometric = ''
        # Set once the first Pixel Data has been passed to the image sink
        self.extracted = False

    def __repr__(self) -> str:
        return (
            f"ImageDescriptor(rows={self.rows}, columns={self.columns}, "
            f"bits_allocated={self.bits_allocated}, "
            f"photometric={self.photometric!r})"
        )

    @property
    def maxval(self) -> int:
        """Return the largest gray value for the bit depth."""
        return 255 if self.bits_allocated <= 8 else 65535

    def pgm_header(self) -> bytes:
        """Return the P5 header for the described image."""
        return f"P5\n{self.columns} {self.rows}\n{self.maxval}\n".encode("ascii")


def write_pgm(
    descriptor: ImageDescriptor,
    data: bytes,
    filename: Optional[PathType] = None,
) -> Optional[PathType]:
    """Write `data` as a P5 graymap described by `descriptor`.

    Parameters
    ----------
    descriptor : ImageDescriptor
        The image dimensions and bit depth.
    data : bytes
        The raw *Pixel Data*, written verbatim after the header.
    filename : str or PathLike, optional
        The output path, default :attr:`~dcmtrace.config.image_filename`.

    Returns
    -------
    str or PathLike or None
        The path written, or ``None`` if the dimensions are unknown or the
        file can't be written.
    """
    if filename is None:
        filename = config.image_filename

    if not descriptor.rows or not descriptor.columns:
        warn_and_log(
            "Image dimensions unknown (Rows/Columns missing or zero); "
            f"'{os.fspath(filename)}' not written"
        )
        return None

    if descriptor.photometric and not descriptor.photometric.startswith(
        "MONOCHROME"
    ):
        logger.info(
            f"Photometric Interpretation is '{descriptor.photometric}', "
            "pixel bytes are written to the graymap unchanged"
        )

    try:
        with open(filename, 'wb') as f:
            f.write(descriptor.pgm_header())
            f.write(data)
    except OSError as exc:
        warn_and_log(f"Unable to write '{os.fspath(filename)}': {exc}")
        return None

    logger.debug(
        f"Wrote {descriptor.columns}x{descriptor.rows} image "
        f"({len(data)} bytes) to '{os.fspath(filename)}'"
    )
    return filename


class PGMWriter:
    """Image sink callable bound to an output path.

    Instances are passed as the `on_pixel_data` argument of
    :func:`~dcmtrace.filereader.trace_file`.
    """
    def __init__(self, filename: Optional[PathType] = None) -> None:
        self.filename = filename
        self.written: Optional[PathType] = None

    def __call__(self, descriptor: ImageDescriptor, data: bytes) -> None:
        self.written = write_pgm(descriptor, data, self.filename)
