# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Module for dcmtrace exception classes"""


class InvalidDicomError(Exception):
    """Exception that is raised when the the file does not appear to be DICOM.

    Only raised when the "DICM" prefix is not present at position 128 in
    the file and reading was not forced.

    To trace the file anyway (because maybe it is a raw dataset without
    a header), use ``trace_file(..., force=True)``.
    """

    def __init__(self, *args):
        if not args:
            args = ('The specified file is not a valid DICOM file.', )
        Exception.__init__(self, *args)
