# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""dcmtrace command line interface program

Trace every data element of a DICOM file to standard output, writing the
*Pixel Data* to a graymap image.
"""

import argparse
import sys
from typing import List, Optional

from dcmtrace import config
from dcmtrace._version import __version__
from dcmtrace.config import logger
from dcmtrace.filebase import DicomFile
from dcmtrace.filereader import trace_file
from dcmtrace.misc import size_in_bytes
from dcmtrace.pixels import PGMWriter


class _ArgumentParser(argparse.ArgumentParser):
    """Exit with status 1, not 2, on a usage error."""
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def skip_size_parser(expr: str) -> int:
    """Utility to parse the ``--skip-size`` option

    Note: this is used as an argparse 'type' for adding parsing arguments.

    Parameters
    ----------
    expr : str
        A number of bytes with an optional ``kB``, ``MB`` or ``GB`` unit.

    Raises
    ------
    argparse.ArgumentTypeError
        If `expr` is not a valid size.
    """
    try:
        size = size_in_bytes(expr)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))

    if size is None or size < 0:
        raise argparse.ArgumentTypeError(f"'{expr}' is not a valid size")

    return int(size)


def get_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="dcmtrace",
        description="Trace the data elements of a DICOM file",
    )
    parser.add_argument("filespec", metavar="FILE", help="The DICOM file")
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help=f"Pixel Data image path (default '{config.image_filename}')",
    )
    parser.add_argument(
        "--no-image",
        help="Don't write the Pixel Data image",
        action="store_true",
    )
    parser.add_argument(
        "--skip-size",
        type=skip_size_parser,
        default=None,
        help=(
            "Skip values longer than this, e.g. '16 MB' "
            f"(default {config.skip_length} bytes)"
        ),
    )
    parser.add_argument(
        "-d",
        "--debug",
        help="Log the file offset and bytes of each element header",
        action="store_true",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Entry point for 'dcmtrace' command line interface

    args: list
        Command-line arguments to parse.  If None, then sys.argv is used

    Returns the exit status: ``0`` when the file was traced, including a
    partial trace of a damaged file, ``1`` for a usage error or a file that
    can't be opened.
    """
    parsed = get_parser().parse_args(args)

    if parsed.debug:
        config.debug(True)

    if parsed.skip_size is not None:
        config.skip_length = parsed.skip_size

    on_pixel_data = None if parsed.no_image else PGMWriter(parsed.output)

    try:
        fp = DicomFile(parsed.filespec, 'rb')
    except OSError as e:
        logger.debug(f"Unable to open '{parsed.filespec}': {e}")
        print("cannot open file", file=sys.stderr)
        return 1

    with fp:
        trace_file(fp, on_pixel_data=on_pixel_data)

    return 0
