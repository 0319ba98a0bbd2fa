"""Console log formatting."""

from __future__ import annotations

import logging
import os
import re
import sys

_NODE_TAG = re.compile(r"^\[NODE-[^\]]+\]")


class ColoredFormatter(logging.Formatter):
    """Colors the level name and the ``[NODE-<id>]`` tag of node log lines.

    Colors are disabled when the ``NO_COLOR`` environment variable is set or
    when the output stream is not a TTY.
    """

    COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    NODE_TAG_COLOR = "\033[35m"
    RESET = "\033[0m"

    def __init__(self, *args, stream=None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._stream = stream

    def _use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        stream = self._stream or sys.stderr
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self._use_color():
            return super().format(record)

        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, "")
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        message = record.getMessage()
        match = _NODE_TAG.match(message)
        if match:
            record.msg = f"{self.NODE_TAG_COLOR}{match.group(0)}{self.RESET}{message[match.end():]}"
            record.args = None
        return super().format(record)
