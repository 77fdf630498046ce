# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Fixtures used in different tests."""

from io import StringIO

import pytest

from dcmtrace import config
from dcmtrace.trace import Trace


class StringTrace(Trace):
    """Trace written to memory, with the written lines available."""
    def __init__(self):
        super().__init__(StringIO())

    @property
    def lines(self):
        return self.stream.getvalue().splitlines()


@pytest.fixture
def trace():
    return StringTrace()


@pytest.fixture
def skip_length():
    value = config.skip_length
    yield
    config.skip_length = value


@pytest.fixture
def debugging():
    config.debug(True, False)
    yield
    config.debug(False, False)
