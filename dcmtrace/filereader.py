# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Walk the data elements of a DICOM file and trace them."""

import os
from struct import unpack
from typing import BinaryIO, Callable, Dict, NamedTuple, Optional, Union

from dcmtrace import config
from dcmtrace.config import logger
from dcmtrace.dataelem import ElementHeader, extra_length_VRs, UNDEFINED_LENGTH
from dcmtrace.errors import InvalidDicomError
from dcmtrace.filebase import DicomIO, DicomFile, DicomFileLike
from dcmtrace.pixels import ImageDescriptor
from dcmtrace.tag import (
    BaseTag, ItemTag, ItemDelimiterTag, SequenceDelimiterTag,
    FileMetaInformationGroupLengthTag, TransferSyntaxUIDTag,
    PhotometricInterpretationTag, RowsTag, ColumnsTag, BitsAllocatedTag,
    PixelDataTag,
)
from dcmtrace.trace import Trace
from dcmtrace.uid import TransferSyntax
from dcmtrace.util.hexutil import bytes2hex


PixelDataCallback = Callable[[ImageDescriptor, bytes], None]

# Image description elements decoded as US wherever they are found
_descriptor_attrs = {
    RowsTag: 'rows',
    ColumnsTag: 'columns',
    BitsAllocatedTag: 'bits_allocated',
}


class TraceResult(NamedTuple):
    """What :func:`trace_file` found out about the file."""
    preamble: bool
    file_meta: Dict[BaseTag, str]
    transfer_syntax: TransferSyntax
    descriptor: ImageDescriptor


def _value_text(value: bytes) -> str:
    """Return `value` without trailing space/NULL padding as text."""
    return value.rstrip(b' \x00').decode(config.default_encoding)


def _log_header(fp: DicomIO, start: int, header: ElementHeader) -> None:
    # Re-read the header bytes for display; leaves `fp` at the value
    fp.seek(start)
    header_bytes = fp.read(header.value_tell - start)
    msg = "{0:08x}: {1:<47}  {2}".format(
        start, bytes2hex(header_bytes), header.tag
    )
    if header.VR:
        msg += f" {header.VR}"
    if header.is_undefined_length:
        msg += " Length: Undefined length (FFFFFFFF)"
    else:
        msg += f" Length: {header.length}"
    logger.debug(msg)


def read_implicit_header(fp: DicomIO, is_little_endian: bool) -> ElementHeader:
    """Read an implicit VR element header: tag and a 4-byte length.

    Parameters
    ----------
    fp : dcmtrace.filebase.DicomIO
        The file positioned at the start of the element.
    is_little_endian : bool
        ``True`` if the header words are little endian.

    Returns
    -------
    dataelem.ElementHeader
        The decoded header with an empty VR, `fp` is left positioned at the
        first byte of the value.

    Raises
    ------
    EOFError
        If the file ends before the 8 header bytes have been read.
    """
    start = fp.tell()
    tag = fp.read_tag(is_little_endian)
    length = fp.read_UL(is_little_endian)
    is_undefined_length = length == UNDEFINED_LENGTH
    header = ElementHeader(
        tag,
        '',
        0 if is_undefined_length else length,
        fp.tell(),
        is_undefined_length,
    )
    if config.debugging:
        _log_header(fp, start, header)

    return header


def read_explicit_header(fp: DicomIO, is_little_endian: bool) -> ElementHeader:
    """Read an explicit VR element header.

    For a VR in :data:`~dcmtrace.dataelem.extra_length_VRs` the header is the
    tag, VR, 2 reserved bytes and a 4-byte length (12 bytes), otherwise the
    tag, VR and a 2-byte length (8 bytes). Items and delimiters have no VR in
    any transfer syntax and are read as implicit VR headers.

    Raises
    ------
    EOFError
        If the file ends before the whole header has been read.
    """
    start = fp.tell()
    tag = fp.read_tag(is_little_endian)
    if tag.group == 0xFFFE:
        # (FFFE,E000), (FFFE,E00D) and (FFFE,E0DD) are always tag + length
        length = fp.read_UL(is_little_endian)
        VR = ''
    else:
        VR = fp.read(2, need_exact_length=True).decode(
            config.default_encoding
        )
        if VR in extra_length_VRs:
            fp.read(2, need_exact_length=True)  # reserved 0x0000
            length = fp.read_UL(is_little_endian)
        else:
            length = fp.read_US(is_little_endian)

    is_undefined_length = length == UNDEFINED_LENGTH
    header = ElementHeader(
        tag,
        VR,
        0 if is_undefined_length else length,
        fp.tell(),
        is_undefined_length,
    )
    if config.debugging:
        _log_header(fp, start, header)

    return header


def read_element_header(
    fp: DicomIO, is_implicit_VR: bool, is_little_endian: bool
) -> ElementHeader:
    """Read the next element header with the strategy for the encoding."""
    if is_implicit_VR:
        return read_implicit_header(fp, is_little_endian)

    return read_explicit_header(fp, is_little_endian)


def read_preamble(fp: DicomIO, force: bool = True) -> bool:
    """Return ``True`` if `fp` has the 'DICM' prefix at offset 128.

    If the prefix is found then after reading `fp` will be positioned at
    the first byte after it (offset 132), otherwise at the start of the
    file-like.

    Parameters
    ----------
    fp : dcmtrace.filebase.DicomIO
        The file to check.
    force : bool, optional
        If ``True`` (default) a missing prefix is not an error and the file
        is read as a raw dataset.

    Raises
    ------
    InvalidDicomError
        If `force` is ``False`` and the prefix is missing.
    """
    logger.debug("Reading File Meta Information prefix...")
    fp.seek(128)
    magic = fp.read(4)
    if magic == b"DICM":
        logger.debug("{0:08x}: 'DICM' prefix found".format(fp.tell() - 4))
        return True

    fp.seek(0)
    if not force:
        raise InvalidDicomError(
            "File is missing DICOM File Meta Information header or the "
            "'DICM' prefix is missing from the header. Use force=True to "
            "read it as a raw dataset."
        )

    logger.info(
        "File is not conformant with the DICOM File Format: 'DICM' "
        "prefix is missing from the File Meta Information header "
        "or the header itself is missing. Assuming no header and "
        "continuing."
    )
    return False


def read_file_meta_info(
    fp: DicomIO, trace: Optional[Trace] = None
) -> Dict[BaseTag, str]:
    """Read the File Meta Information group (0002,eeee) elements.

    File Meta elements are always Explicit VR Little Endian (DICOM Standard,
    Part 10, Section 7). Reading stops at the first element of any other
    group, or at the first element that can't be read, and `fp` is
    positioned back at the start of that element.

    Parameters
    ----------
    fp : dcmtrace.filebase.DicomIO
        The file positioned just after the 'DICM' prefix.
    trace : dcmtrace.trace.Trace, optional
        If used, a ``[FileMeta]`` line is written for each element.

    Returns
    -------
    dict
        The padding-stripped value of each element, as text, keyed by tag.
    """
    file_meta: Dict[BaseTag, str] = {}
    group_length = None
    group_start = 0
    while True:
        pos = fp.tell()
        try:
            header = read_explicit_header(fp, is_little_endian=True)
        except EOFError as exc:
            logger.debug(f"File Meta Information ended: {exc}")
            fp.seek(pos)
            break

        if header.tag.group != 0x0002:
            fp.seek(pos)
            break

        try:
            value = fp.read(header.length, need_exact_length=True)
        except EOFError as exc:
            logger.debug(f"File Meta Information ended: {exc}")
            fp.seek(pos)
            break

        text = _value_text(value)
        file_meta[header.tag] = text
        if trace is not None:
            trace.line(
                f"[FileMeta] {header.tag} {header.VR} len={header.length} "
                f"value={text}"
            )

        if header.tag == FileMetaInformationGroupLengthTag and len(value) == 4:
            group_length = unpack("<L", value)[0]
            group_start = header.value_end

        fp.seek(header.value_end)

    # Log if the Group Length doesn't match actual length
    if group_length is not None:
        actual_length = fp.tell() - group_start
        if group_length != actual_length:
            logger.info(
                "read_file_meta_info: (0002,0000) 'File Meta Information "
                "Group Length' value doesn't match the actual File Meta "
                f"Information length ({group_length} vs {actual_length} bytes)."
            )

    return file_meta


def _capture_descriptor(
    fp: DicomIO,
    header: ElementHeader,
    descriptor: ImageDescriptor,
    is_little_endian: bool,
) -> None:
    """Decode a US image description value, leaving `fp` at the value."""
    try:
        value = fp.read_US(is_little_endian)
    except EOFError:
        # The value is read again, and fails, as a regular element
        pass
    else:
        setattr(descriptor, _descriptor_attrs[header.tag], value)
    fp.seek(header.value_tell)


def walk_dataset(
    fp: DicomIO,
    transfer_syntax: TransferSyntax,
    trace: Trace,
    descriptor: ImageDescriptor,
    on_pixel_data: Optional[PixelDataCallback] = None,
    depth: int = 0,
    end: Optional[int] = None,
) -> None:
    """Trace the data elements from the current position of `fp`.

    Sequences and items are walked recursively, one nesting level deeper.
    A level ends at an item or sequence delimiter, at `end`, at the end of
    the file or at the first element that can't be read, in which case `fp`
    is put back at the start of that element. A defined length sequence or
    item is walked only up to its end and always left there, whatever its
    contents, so the elements that follow it are never visited at the nested
    depth.

    Parameters
    ----------
    fp : dcmtrace.filebase.DicomIO
        The file positioned at the first element of the (sub-)dataset.
    transfer_syntax : dcmtrace.uid.TransferSyntax
        The encoding of the dataset.
    trace : dcmtrace.trace.Trace
        Where the trace lines are written.
    descriptor : dcmtrace.pixels.ImageDescriptor
        Updated with the image description elements as they are found.
    on_pixel_data : callable, optional
        Called with `descriptor` and the value bytes of the first *Pixel
        Data* element with a defined length.
    depth : int, optional
        The nesting level, lines are indented by two spaces per level.
    end : int, optional
        The offset of the end of the defined length sequence or item being
        walked, ``None`` if the level only ends at a delimiter.
    """
    is_implicit_VR = transfer_syntax.is_implicit_VR
    is_little_endian = transfer_syntax.is_little_endian
    line = trace.line

    while True:
        pos = fp.tell()
        if not fp.good() or (end is not None and pos >= end):
            return

        try:
            header = read_element_header(fp, is_implicit_VR, is_little_endian)
        except EOFError as exc:
            logger.debug(f"{exc} - ending dataset at depth {depth}")
            fp.seek(pos)
            return

        tag = header.tag
        if (
            tag in _descriptor_attrs
            and not header.is_undefined_length
            and header.length >= 2
        ):
            _capture_descriptor(fp, header, descriptor, is_little_endian)

        if tag == SequenceDelimiterTag:
            line("[SEQ_DELIM] Sequence delimiter found", depth)
            return

        if tag == ItemDelimiterTag:
            line("[ITEM_DELIM] Item delimiter found", depth)
            return

        if tag == ItemTag:
            line(f"[ITEM] {tag} len={header.length_str}", depth)
            if header.is_undefined_length:
                walk_dataset(
                    fp, transfer_syntax, trace, descriptor, on_pixel_data,
                    depth + 1
                )
            elif header.length > 0:
                walk_dataset(
                    fp, transfer_syntax, trace, descriptor, on_pixel_data,
                    depth + 1, header.value_end
                )
                fp.seek(header.value_end)
            continue

        is_pixel_data = tag == PixelDataTag
        is_oversized = (
            not header.is_undefined_length
            and config.skip_length is not None
            and header.length > config.skip_length
        )
        if is_pixel_data or is_oversized:
            line(f"[SKIP] {tag} len={header.length_str}", depth)
            if header.is_undefined_length:
                # Encapsulated fragments follow as items of this level
                line(
                    "[WARN] Undefined-length Pixel Data; skipping to next "
                    "element.",
                    depth
                )
                logger.warning(
                    f"{header.value_tell:08x}: Encapsulated Pixel Data is "
                    "not extracted"
                )
                continue

            if (
                is_pixel_data
                and on_pixel_data is not None
                and not descriptor.extracted
            ):
                try:
                    data = fp.read(header.length, need_exact_length=True)
                except EOFError as exc:
                    logger.warning(f"{exc} while reading Pixel Data")
                    fp.seek(pos)
                    return

                descriptor.extracted = True
                on_pixel_data(descriptor, data)

            fp.seek(header.value_end)
            continue

        if header.is_undefined_length and header.VR in ('SQ', ''):
            line(f"[SEQUENCE] {tag} VR=SQ len=undefined", depth)
            walk_dataset(
                fp, transfer_syntax, trace, descriptor, on_pixel_data,
                depth + 1
            )
            continue

        if header.VR == 'SQ' and header.length > 0:
            line(f"[SEQUENCE] {tag} VR=SQ len={header.length}", depth)
            walk_dataset(
                fp, transfer_syntax, trace, descriptor, on_pixel_data,
                depth + 1, header.value_end
            )
            fp.seek(header.value_end)
            continue

        try:
            value = fp.read(header.length, need_exact_length=True)
        except EOFError as exc:
            logger.debug(f"{exc} - ending dataset at depth {depth}")
            fp.seek(pos)
            return

        text = _value_text(value)
        if tag == PhotometricInterpretationTag:
            descriptor.photometric = text

        line(
            f"[DataSet] {tag} VR={header.VR or '--'} len={header.length}  "
            f"Value=\"{text}\"",
            depth
        )
        fp.seek(header.value_end)


def _trace(
    fp: DicomIO,
    trace: Trace,
    on_pixel_data: Optional[PixelDataCallback],
    force: bool,
) -> TraceResult:
    preamble = read_preamble(fp, force)
    if preamble:
        trace.line("[DICOM] Magic header OK (DICM)")
        file_meta = read_file_meta_info(fp, trace)
        transfer_syntax = TransferSyntax.from_uid(
            file_meta.get(TransferSyntaxUIDTag)
        )
    else:
        trace.line(
            "[WARN] No DICM preamble; treating as raw dataset "
            "(no File Meta group)."
        )
        file_meta = {}
        transfer_syntax = TransferSyntax.Unknown

    trace.line(f"[INFO] Transfer Syntax = {transfer_syntax.description}")

    descriptor = ImageDescriptor()
    walk_dataset(fp, transfer_syntax, trace, descriptor, on_pixel_data)
    trace.line("[END] Parsed OK.")

    return TraceResult(preamble, file_meta, transfer_syntax, descriptor)


def trace_file(
    fp: Union[str, "os.PathLike[str]", BinaryIO, DicomIO],
    trace: Optional[Trace] = None,
    on_pixel_data: Optional[PixelDataCallback] = None,
    force: bool = True,
) -> TraceResult:
    """Trace every data element in a DICOM file.

    Parameters
    ----------
    fp : str or PathLike or file-like
        Either a file-like object, or a path to the file. A file-like object
        is not closed when the function returns.
    trace : dcmtrace.trace.Trace, optional
        Where the trace lines are written, default standard output.
    on_pixel_data : callable, optional
        The image sink, called once with the image description and the value
        of the first *Pixel Data* element with a defined length. See
        :class:`~dcmtrace.pixels.PGMWriter`.
    force : bool, optional
        If ``True`` (default) a file without the 'DICM' prefix is traced as
        a raw Explicit VR Little Endian dataset, otherwise
        :class:`~dcmtrace.errors.InvalidDicomError` is raised.

    Returns
    -------
    TraceResult
        The preamble flag, File Meta values, transfer syntax and image
        description found.

    Raises
    ------
    OSError
        If the file at the path `fp` can't be opened.
    InvalidDicomError
        If `force` is ``False`` and the 'DICM' prefix is missing.
    """
    if trace is None:
        trace = Trace()

    if isinstance(fp, (str, os.PathLike)):
        logger.debug(f"Reading file '{os.fspath(fp)}'")
        with DicomFile(fp, 'rb') as f:
            return _trace(f, trace, on_pixel_data, force)

    if not isinstance(fp, DicomIO):
        fp = DicomFileLike(fp)

    return _trace(fp, trace, on_pixel_data, force)
