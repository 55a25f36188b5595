"""Unbalanced binary search tree of integers used to detect repeats."""

from __future__ import annotations

import sys
from typing import Iterable, Iterator, Optional, TextIO


class _Node:
    __slots__ = ("value", "left", "right")

    def __init__(self, value: int) -> None:
        self.value = value
        self.left: Optional[_Node] = None
        self.right: Optional[_Node] = None


class IntTree:
    """A set of integers kept in a plain binary search tree."""

    def __init__(self, values: Iterable[int] = ()) -> None:
        self._root: Optional[_Node] = None
        self._size = 0
        for value in values:
            self.add(value)

    def add(self, value: int) -> bool:
        """Insert ``value``; return True if it was already present."""
        parent: Optional[_Node] = None
        node = self._root
        go_right = False
        while node is not None:
            if value == node.value:
                return True
            parent = node
            go_right = value > node.value
            node = node.right if go_right else node.left

        leaf = _Node(value)
        if parent is None:
            self._root = leaf
        elif go_right:
            parent.right = leaf
        else:
            parent.left = leaf
        self._size += 1
        return False

    def __contains__(self, value: object) -> bool:
        node = self._root
        while node is not None:
            if value == node.value:
                return True
            node = node.right if value > node.value else node.left  # type: ignore[operator]
        return False

    def __iter__(self) -> Iterator[int]:
        stack: list[_Node] = []
        node = self._root
        while stack or node is not None:
            while node is not None:
                stack.append(node)
                node = node.left
            node = stack.pop()
            yield node.value
            node = node.right

    def __len__(self) -> int:
        return self._size

    def dump(self, stream: Optional[TextIO] = None) -> None:
        """Write the values in ascending order, each followed by ", "."""
        out = sys.stdout if stream is None else stream
        out.write("".join(f"{value}, " for value in self))

    def clear(self) -> None:
        """Remove every value."""
        self._root = None
        self._size = 0