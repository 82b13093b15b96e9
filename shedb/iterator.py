"""Range iteration over a tree."""

from __future__ import annotations

from typing import Iterator as TypingIterator
from typing import Optional

from shedb.node import Node
from shedb.utils import clone


class Iterator:
    """Iterates the leaves of a tree within ``[start, end)``.

    ``None`` bounds are open. Leaves come in ascending or descending key order.
    """

    def __init__(
        self,
        start: Optional[bytes],
        end: Optional[bytes],
        ascending: bool,
        root: Optional[Node],
        zero_copy: bool,
    ) -> None:
        self._start = start
        self._end = end
        self._ascending = ascending
        self._zero_copy = zero_copy
        self._key: Optional[bytes] = None
        self._value: Optional[bytes] = None
        self._valid = True
        self._stack: list[Node] = [root] if root is not None else []
        self.next()

    def domain(self) -> tuple[Optional[bytes], Optional[bytes]]:
        """Return the start and end bounds."""
        return self._start, self._end

    def valid(self) -> bool:
        """Whether the iterator points at a key/value pair."""
        return self._valid

    def key(self) -> Optional[bytes]:
        """Key of the current pair."""
        return self._key if self._zero_copy else clone(self._key)

    def value(self) -> Optional[bytes]:
        """Value of the current pair."""
        return self._value if self._zero_copy else clone(self._value)

    def next(self) -> None:
        """Advance to the next pair in range, or become invalid."""
        start, end = self._start, self._end
        while self._stack:
            node = self._stack.pop()
            key = node.key
            after_start = start is None or start < key
            before_end = end is None or key < end

            if node.is_leaf:
                if (after_start or start == key) and before_end:
                    self._key = key
                    self._value = node.value
                    return
            elif self._ascending:
                if before_end:
                    self._stack.append(node.right)
                if after_start:
                    self._stack.append(node.left)
            else:
                if after_start:
                    self._stack.append(node.left)
                if before_end:
                    self._stack.append(node.right)

        self._valid = False

    def close(self) -> None:
        """Stop iterating and release the traversal state."""
        self._valid = False
        self._stack = []

    def __iter__(self) -> TypingIterator[tuple[Optional[bytes], Optional[bytes]]]:
        while self._valid:
            yield self.key(), self.value()
            self.next()