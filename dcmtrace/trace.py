# Copyright 2024 dcmtrace authors. See LICENSE file for details.
"""Line oriented text output of the element walk."""

import sys
from typing import Optional, TextIO


INDENT = "  "


class Trace:
    """Write-only sink for trace lines.

    Each line is indented by two spaces per nesting level.

    Parameters
    ----------
    stream : file-like, optional
        The text stream to write to. If ``None`` (default) then
        :data:`sys.stdout` is looked up at each write, so output captured by
        replacing :data:`sys.stdout` is honoured.
    """
    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        if self._stream is None:
            return sys.stdout

        return self._stream

    def line(self, text: str, depth: int = 0) -> None:
        """Write `text` indented for nesting level `depth`."""
        self.stream.write(f"{INDENT * depth}{text}\n")
