# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""dcmtrace configuration options."""

# doc strings following items are picked up by sphinx for documentation

import logging


skip_length = 0x1000000
"""Values with a defined length greater than this number of bytes are not
read into memory; the trace shows a ``[SKIP]`` line and the reader seeks past
them.

Default ``0x1000000`` (16 MiB).
"""

image_filename = "output_image.pgm"
"""The path of the grayscale image written when *Pixel Data* with a defined
length is found, relative to the current working directory.

Default ``'output_image.pgm'``.
"""

default_encoding = "iso8859"
"""The codec used to turn element values into text for the trace. No
*Specific Character Set* conversion is done.

Default ``'iso8859'``.
"""

debugging: bool
"""``True`` if DEBUG logging is on, set using :func:`debug`."""

# Logging system and debug function to change logging level
logger = logging.getLogger('dcmtrace')
logger.addHandler(logging.NullHandler())


def debug(debug_on=True, default_handler=True):
    """Turn on/off debugging of DICOM file reading.

    When debugging is on, file location and details about the element headers
    read at that location are logged to the 'dcmtrace' logger using Python's
    :mod:`logging` module.

    Parameters
    ----------
    debug_on : bool, optional
        If ``True`` (default) then turn on debugging, ``False`` to turn off.
    default_handler : bool, optional
        If ``True`` (default) then use :class:`logging.StreamHandler` as the
        handler for log messages.
    """
    global logger, debugging

    if default_handler:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if debug_on:
        logger.setLevel(logging.DEBUG)
        debugging = True
    else:
        logger.setLevel(logging.WARNING)
        debugging = False


# force level=WARNING, in case logging default is set differently
debug(False, False)
