# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Hold DicomFile class, which does basic I/O for a dicom file."""

from io import BytesIO
from struct import Struct
from typing import Any, BinaryIO, Optional

from dcmtrace.tag import BaseTag, TupleTag


_le_us = Struct("<H").unpack
_be_us = Struct(">H").unpack
_le_ul = Struct("<L").unpack
_be_ul = Struct(">L").unpack
_le_tag = Struct("<HH").unpack
_be_tag = Struct(">HH").unpack


class DicomIO:
    """File object with the positioned reads needed to walk a dataset.

    The byte order is passed to every multi-byte read; the object itself
    holds no endian state, so the same file can be read with the Explicit VR
    Little Endian File Meta group followed by a Big Endian dataset.
    """

    # number of times to read if don't get requested bytes
    max_read_attempts = 3

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._eof = False

    def parent_read(self, length: int = -1) -> bytes:
        raise IOError("This DicomIO object has no read() method")

    def parent_seek(self, offset: int, whence: int = 0) -> int:
        raise IOError("This DicomIO object has no seek() method")

    def tell(self) -> int:
        raise IOError("This DicomIO object has no tell() method")

    def read(self, length: Optional[int] = None,
             need_exact_length: bool = False) -> bytes:
        """Reads the required length, raises EOFError if gets less

        If length is ``None``, then read all bytes
        """
        parent_read = self.parent_read
        if length is None:
            return parent_read()  # get all of it
        bytes_read = parent_read(length)
        if len(bytes_read) < length:
            # Didn't get all the desired bytes. Keep trying to get the rest.
            # If reading across network, might want to add a delay here
            attempts = 0
            max_reads = self.max_read_attempts
            while attempts < max_reads and len(bytes_read) < length:
                bytes_read += parent_read(length - len(bytes_read))
                attempts += 1
            num_bytes = len(bytes_read)
            if num_bytes < length:
                self._eof = True
                if need_exact_length:
                    start_pos = self.tell() - num_bytes
                    msg = ("Unexpected end of file. Read {0} bytes of {1} "
                           "expected starting at position 0x{2:x}".format(
                               num_bytes, length, start_pos))
                    raise EOFError(msg)
        return bytes_read

    def seek(self, offset: int, whence: int = 0) -> int:
        """Move to `offset`; moving past the end of the file is allowed and
        only noticed by the next read.
        """
        self._eof = False
        return self.parent_seek(offset, whence)

    def good(self) -> bool:
        """Return ``False`` if the last read came up short and there has
        been no seek since.
        """
        return not self._eof

    def read_US(self, little: bool = True) -> int:
        """Return an unsigned short read with the given byte order"""
        unpack = _le_us if little else _be_us
        return unpack(self.read(2, need_exact_length=True))[0]

    def read_UL(self, little: bool = True) -> int:
        """Return an unsigned long read with the given byte order"""
        unpack = _le_ul if little else _be_ul
        return unpack(self.read(4, need_exact_length=True))[0]

    def read_tag(self, little: bool = True) -> BaseTag:
        """Read and return a tag made of two unsigned shorts."""
        unpack = _le_tag if little else _be_tag
        return TupleTag(unpack(self.read(4, need_exact_length=True)))

    def __enter__(self) -> "DicomIO":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        pass


class DicomFileLike(DicomIO):
    def __init__(self, file_like_obj: BinaryIO, *args: Any,
                 **kwargs: Any) -> None:
        super(DicomFileLike, self).__init__(*args, **kwargs)
        self.parent = file_like_obj
        self.parent_read = getattr(file_like_obj, "read", self.no_read)
        self.parent_seek = getattr(file_like_obj, "seek", self.no_seek)
        self.tell = file_like_obj.tell
        self.close = getattr(file_like_obj, "close", self.no_close)
        self.name = getattr(file_like_obj, 'name', '<no filename>')

    def no_read(self, length: int = -1) -> bytes:
        """Used for file-like objects where no read is available"""
        raise IOError("This DicomFileLike object has no read() method")

    def no_seek(self, offset: int, whence: int = 0) -> int:
        """Used for file-like objects where no seek is available"""
        raise IOError("This DicomFileLike object has no seek() method")

    def no_close(self) -> None:
        pass


def DicomFile(*args: Any, **kwargs: Any) -> DicomFileLike:
    return DicomFileLike(open(*args, **kwargs))


class DicomBytesIO(DicomFileLike):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super(DicomBytesIO, self).__init__(BytesIO(*args, **kwargs))

    def getvalue(self) -> bytes:
        return self.parent.getvalue()
