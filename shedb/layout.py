"""Fixed-size binary layouts of persisted branch and leaf nodes.

All integers are little endian.

Branch node (48 bytes):
    height (1), pre_trees (1), padding (2), version (4), size (4),
    key_leaf (4, index of the smallest leaf in the right branch), hash (32)

Leaf node (48 bytes):
    version (4), key_len (4), key_offset (8), hash (32)
"""

from __future__ import annotations

import struct

OFFSET_HEIGHT = 0
OFFSET_PRE_TREES = OFFSET_HEIGHT + 1
OFFSET_VERSION = OFFSET_HEIGHT + 4
OFFSET_SIZE = OFFSET_VERSION + 4
OFFSET_KEY_LEAF = OFFSET_SIZE + 4

OFFSET_HASH = OFFSET_KEY_LEAF + 4
SIZE_HASH = 32
SIZE_NODE_WITHOUT_HASH = OFFSET_HASH
SIZE_NODE = SIZE_NODE_WITHOUT_HASH + SIZE_HASH

OFFSET_LEAF_VERSION = 0
OFFSET_LEAF_KEY_LEN = OFFSET_LEAF_VERSION + 4
OFFSET_LEAF_KEY_OFFSET = OFFSET_LEAF_KEY_LEN + 4
OFFSET_LEAF_HASH = OFFSET_LEAF_KEY_OFFSET + 8
SIZE_LEAF_WITHOUT_HASH = OFFSET_LEAF_HASH
SIZE_LEAF = SIZE_LEAF_WITHOUT_HASH + SIZE_HASH

_UINT32_MASK = 0xFFFFFFFF

_BRANCH_HEADER = struct.Struct("<BBxxIII")
_LEAF_HEADER = struct.Struct("<IIQ")


class NodeLayout:
    """View over the bytes of one persisted branch node."""

    __slots__ = ("_data",)

    def __init__(self, data: memoryview) -> None:
        self._data = data

    @property
    def height(self) -> int:
        return self._data[OFFSET_HEIGHT]

    @property
    def pre_trees(self) -> int:
        return self._data[OFFSET_PRE_TREES]

    @property
    def version(self) -> int:
        return int.from_bytes(self._data[OFFSET_VERSION:OFFSET_VERSION + 4], "little")

    @property
    def size(self) -> int:
        return int.from_bytes(self._data[OFFSET_SIZE:OFFSET_SIZE + 4], "little")

    @property
    def key_leaf(self) -> int:
        return int.from_bytes(self._data[OFFSET_KEY_LEAF:OFFSET_KEY_LEAF + 4], "little")

    @property
    def hash(self) -> bytes:
        return bytes(self._data[OFFSET_HASH:OFFSET_HASH + SIZE_HASH])


class LeafLayout:
    """View over the bytes of one persisted leaf node."""

    __slots__ = ("_data",)

    def __init__(self, data: memoryview) -> None:
        self._data = data

    @property
    def version(self) -> int:
        return int.from_bytes(
            self._data[OFFSET_LEAF_VERSION:OFFSET_LEAF_VERSION + 4], "little"
        )

    @property
    def key_length(self) -> int:
        return int.from_bytes(
            self._data[OFFSET_LEAF_KEY_LEN:OFFSET_LEAF_KEY_LEN + 4], "little"
        )

    @property
    def key_offset(self) -> int:
        return int.from_bytes(
            self._data[OFFSET_LEAF_KEY_OFFSET:OFFSET_LEAF_KEY_OFFSET + 8], "little"
        )

    @property
    def hash(self) -> bytes:
        return bytes(self._data[OFFSET_LEAF_HASH:OFFSET_LEAF_HASH + SIZE_HASH])


class Nodes:
    """A contiguous array of persisted branch nodes."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = memoryview(data)

    def __len__(self) -> int:
        return len(self._data) // SIZE_NODE

    def node(self, i: int) -> NodeLayout:
        """Return the branch node at index ``i``."""
        offset = i * SIZE_NODE
        if i < 0 or offset + SIZE_NODE > len(self._data):
            raise IndexError(f"node index out of range: {i}")
        return NodeLayout(self._data[offset:offset + SIZE_NODE])


class Leaves:
    """A contiguous array of persisted leaf nodes."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = memoryview(data)

    def __len__(self) -> int:
        return len(self._data) // SIZE_LEAF

    def leaf(self, i: int) -> LeafLayout:
        """Return the leaf node at index ``i``."""
        offset = i * SIZE_LEAF
        if i < 0 or offset + SIZE_LEAF > len(self._data):
            raise IndexError(f"leaf index out of range: {i}")
        return LeafLayout(self._data[offset:offset + SIZE_LEAF])


def _check_hash(hash_: bytes) -> bytes:
    if len(hash_) != SIZE_HASH:
        raise ValueError(f"hash must be {SIZE_HASH} bytes, got {len(hash_)}")
    return bytes(hash_)


def encode_branch(
    height: int, pre_trees: int, version: int, size: int, key_leaf: int, hash_: bytes
) -> bytes:
    """Encode one branch node in its persisted layout."""
    hash_ = _check_hash(hash_)
    try:
        header = _BRANCH_HEADER.pack(height, pre_trees, version, size, key_leaf)
    except struct.error as exc:
        raise ValueError(f"branch field out of range: {exc}") from exc
    return header + hash_


def encode_leaf(version: int, key_len: int, key_offset: int, hash_: bytes) -> bytes:
    """Encode one leaf node in its persisted layout."""
    hash_ = _check_hash(hash_)
    try:
        header = _LEAF_HEADER.pack(version, key_len, key_offset)
    except struct.error as exc:
        raise ValueError(f"leaf field out of range: {exc}") from exc
    return header + hash_


def get_start_leaf(index: int, size: int, pre_trees: int) -> int:
    """Index of the first leaf under the branch at ``index``.

    start leaf = pre leaves = (index + 1) - (size - 1) + pre_trees
    """
    return (index + 2 - size + pre_trees) & _UINT32_MASK


def get_end_leaf(index: int, pre_trees: int) -> int:
    """Index of the last leaf under the branch at ``index``."""
    return (index + pre_trees + 1) & _UINT32_MASK


def get_left_branch(key_leaf: int, pre_trees: int) -> int:
    """Index of the left child branch of a node with the given key leaf."""
    return (key_leaf - pre_trees - 2) & _UINT32_MASK