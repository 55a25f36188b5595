"""Message logging to stdout, stderr, syslog, a file or nowhere."""

from __future__ import annotations

import enum
import re
import sys
from typing import Optional, TextIO

try:
    import syslog as _syslog
except ImportError:  # platforms without syslog
    _syslog = None

MAX_MESSAGE_LENGTH = 10239
"""Messages longer than this are cut before output."""

_C_SPACE = frozenset(" \t\n\v\f\r")
_WRAP_BREAK = re.compile(r"[\t\r\n\v ]")


class OutputMode(enum.Enum):
    """Where log messages go."""

    STDERR = 1
    STDOUT = 2
    FILE = 3
    SYSLOG = 4
    NULL = 5


def _default_mode() -> OutputMode:
    return OutputMode.SYSLOG if _syslog is not None else OutputMode.STDERR


def _default_priority() -> int:
    if _syslog is None:
        return 0
    return _syslog.LOG_MAIL | _syslog.LOG_INFO


class Logger:
    """Formats and routes log lines to the selected destination."""

    def __init__(
        self, mode: Optional[OutputMode] = None, stream: Optional[TextIO] = None
    ) -> None:
        self.mode = _default_mode() if mode is None else mode
        self.stream = stream
        self.syslog_priority = _default_priority()
        self.wrap = 0
        self.wraplength = 0

    def set_logfile(self, path: str) -> None:
        """Open ``path`` for appending and use it as the file destination."""
        self.stream = None
        self.stream = open(path, "a", encoding="utf-8")

    def close_logfile(self) -> None:
        """Close the file destination, if any."""
        if self.stream is not None:
            self.stream.close()
            self.stream = None

    def clean_output(self, text: str) -> str:
        """Return ``text`` with percent signs doubled and wrapping applied."""
        maxsize = 2 * len(text)
        out: list[str] = []
        produced = 0
        line_size = 0

        for pos, ch in enumerate(text):
            if self.wrap > 0:
                if ch in _C_SPACE:
                    nxt = _WRAP_BREAK.search(text, pos + 1)
                    if nxt is not None and line_size + (nxt.start() - pos) >= self.wraplength:
                        out.append("\n")
                        produced += 1
                        line_size = 0
                if line_size >= self.wraplength:
                    out.append("\n")
                    produced += 1
                    line_size = 0

            if ch == "%":
                out.append("%")
                produced += 1

            out.append(ch)
            produced += 1
            line_size += 1

            if produced > maxsize - 1:
                break

        return "".join(out)

    def log(self, message: str) -> None:
        """Emit ``message``, adding a line break unless it ends with one."""
        output = self.clean_output(message[:MAX_MESSAGE_LENGTH])
        line_end = "" if output.endswith("\n") else "\n"

        if self.mode is OutputMode.NULL:
            return
        if self.mode is OutputMode.STDOUT:
            sys.stdout.write(output + line_end)
            sys.stdout.flush()
        elif self.mode is OutputMode.FILE:
            if self.stream is None:
                raise ValueError("file logging selected but no log file is open")
            self.stream.write(output + line_end)
            self.stream.flush()
        elif self.mode is OutputMode.SYSLOG and _syslog is not None:
            _syslog.syslog(self.syslog_priority, output)
        else:
            sys.stderr.write(output + line_end)
            sys.stderr.flush()


_shared_logger = Logger()


def get_logger() -> Logger:
    """Return the logger shared by the whole package."""
    return _shared_logger


def log(message: str) -> None:
    """Log ``message`` through the shared logger."""
    _shared_logger.log(message)