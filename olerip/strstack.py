"""Last-in, first-out stack of strings."""

from __future__ import annotations

from typing import Iterator, Optional

from .logger import Logger, log

STRLEN_MAX = 1024
"""Popped strings are cut to fewer than this many characters."""


class StringStack:
    """A stack of strings, newest first."""

    def __init__(self, debug: bool = False, verbose: bool = False) -> None:
        self.debug = debug
        self.verbose = verbose
        self._items: list[str] = []

    def push(self, data: str) -> None:
        """Put ``data`` on top of the stack."""
        if self.debug:
            log(f"StringStack.push: Pushing {data}, stack count = {len(self._items)}")
        self._items.append(data)

    def pop(self) -> Optional[str]:
        """Remove and return the top string, or None if the stack is empty."""
        if not self._items:
            return None
        return self._items.pop()[: STRLEN_MAX - 1]

    def top(self) -> Optional[str]:
        """Return the top string without removing it, or None if empty."""
        return self._items[-1] if self._items else None

    def find(self, prefix: str) -> Optional[str]:
        """Return the topmost string starting with ``prefix``, or None."""
        return next((item for item in self if item.startswith(prefix)), None)

    def dump(self, logger: Optional[Logger] = None) -> None:
        """Log every string, top first."""
        emit = log if logger is None else logger.log
        for item in self:
            emit(item)

    def clear(self) -> None:
        """Remove every string."""
        if self.debug:
            for item in self:
                log(f"StringStack.clear: Popping off {item}")
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return reversed(self._items)