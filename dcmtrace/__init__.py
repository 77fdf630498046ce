# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""dcmtrace package -- trace the data elements of DICOM files.

Quick Start
-----------
1. Trace a file to standard output, writing the pixel data as a graymap::

    from dcmtrace import trace_file
    from dcmtrace.pixels import PGMWriter
    trace_file("file1.dcm", on_pixel_data=PGMWriter("file1.pgm"))

2. From the command line::

    dcmtrace file1.dcm -o file1.pgm
"""

from dcmtrace._version import __version__, __version_info__
from dcmtrace.filereader import trace_file, walk_dataset

__all__ = [
    'trace_file',
    'walk_dataset',
    '__version__',
    '__version_info__',
]
