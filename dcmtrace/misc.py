# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Miscellaneous helper functions"""

import re
from typing import Optional, Type, Union
import warnings

from dcmtrace.config import logger


_size_factors = {
    "kb": 1024,
    "mb": 1024 * 1024,
    "gb": 1024 * 1024 * 1024,
}


def size_in_bytes(expr: Union[None, int, float, str]) -> Union[None, float, int]:
    """Return the number of bytes for a size given as a number or a string
    such as ``'16 MB'``.

    Used for the ``--skip-size`` option of the command line interface.
    """
    if expr is None or expr == float('inf'):
        return None

    if isinstance(expr, (int, float)):
        return expr

    try:
        return int(expr)
    except ValueError:
        pass

    match = re.match(r"\s*(\d+(\.\d+)?)\s*([a-zA-Z]+)\s*$", expr)
    if match:
        value, _, unit = match.groups()
        unit = unit.lower()
        if unit in _size_factors:
            return int(float(value) * _size_factors[unit])

    raise ValueError(f"Unable to parse length with unit '{expr}'")


def warn_and_log(
    msg: str, category: Optional[Type[Warning]] = None, stacklevel: int = 1
) -> None:
    """Send warning message `msg` to the logger.

    Parameters
    ----------
    msg : str
        The warning message.
    category : type[Warning] | None, optional
        The warning category class, defaults to ``UserWarning``.
    stacklevel : int, optional
        The stack level to refer to, relative to where `warn_and_log` is used.
    """
    logger.warning(msg)
    warnings.warn(msg, category, stacklevel=stacklevel + 1)
