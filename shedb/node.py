"""In-memory IAVL nodes: insertion, removal, rebalancing and hashing."""

from __future__ import annotations

import hashlib
from typing import Optional, Protocol


class Node(Protocol):
    """Common shape of in-memory and persisted tree nodes."""

    @property
    def height(self) -> int: ...

    @property
    def is_leaf(self) -> bool: ...

    @property
    def size(self) -> int: ...

    @property
    def version(self) -> int: ...

    @property
    def key(self) -> bytes: ...

    @property
    def value(self) -> Optional[bytes]: ...

    @property
    def left(self) -> Optional["Node"]: ...

    @property
    def right(self) -> Optional["Node"]: ...

    def hash(self) -> Optional[bytes]: ...

    def safe_hash(self) -> Optional[bytes]: ...

    def mutate(self, version: int, cow_version: int) -> "MemNode": ...

    def get(self, key: bytes) -> tuple[Optional[bytes], int]: ...

    def get_by_index(self, index: int) -> tuple[Optional[bytes], Optional[bytes]]: ...


class MemNode:
    """A mutable tree node that lives in memory."""

    __slots__ = ("height", "size", "version", "key", "value", "left", "right", "_hash")

    def __init__(
        self,
        height: int = 0,
        size: int = 0,
        version: int = 0,
        key: bytes = b"",
        value: Optional[bytes] = None,
        left: Optional[Node] = None,
        right: Optional[Node] = None,
    ) -> None:
        self.height = height
        self.size = size
        self.version = version
        self.key = key
        self.value = value
        self.left = left
        self.right = right
        self._hash: Optional[bytes] = None

    def __repr__(self) -> str:
        return (
            f"MemNode(height={self.height}, size={self.size}, version={self.version}, "
            f"key={self.key!r})"
        )

    @property
    def is_leaf(self) -> bool:
        return self.height == 0

    def _clone(self) -> "MemNode":
        cloned = MemNode(
            self.height, self.size, self.version, self.key, self.value, self.left, self.right
        )
        cloned._hash = self._hash
        return cloned

    def mutate(self, version: int, cow_version: int) -> "MemNode":
        """Clone the node if its version is <= ``cow_version``, else modify in place."""
        node = self._clone() if self.version <= cow_version else self
        node.version = version
        node._hash = None
        return node

    def safe_hash(self) -> Optional[bytes]:
        return self.hash()

    def hash(self) -> Optional[bytes]:
        """Hash of the node, computed once and cached."""
        if self._hash is None:
            self._hash = hash_node(self)
        return self._hash

    def _update_height_size(self) -> None:
        assert self.left is not None and self.right is not None
        self.height = max(self.left.height, self.right.height) + 1
        self.size = self.left.size + self.right.size

    def _calc_balance(self) -> int:
        return _calc_balance(self)

    def _rotate_right(self, version: int, cow_version: int) -> "MemNode":
        assert self.left is not None
        new_self = self.left.mutate(version, cow_version)
        self.left = self.left.right
        new_self.right = self
        self._update_height_size()
        new_self._update_height_size()
        return new_self

    def _rotate_left(self, version: int, cow_version: int) -> "MemNode":
        assert self.right is not None
        new_self = self.right.mutate(version, cow_version)
        self.right = self.right.left
        new_self.left = self
        self._update_height_size()
        new_self._update_height_size()
        return new_self

    def _rebalance(self, version: int, cow_version: int) -> "MemNode":
        balance = self._calc_balance()
        if balance > 1:
            assert self.left is not None
            if _calc_balance(self.left) >= 0:
                return self._rotate_right(version, cow_version)
            self.left = self.left.mutate(version, cow_version)._rotate_left(version, cow_version)
            return self._rotate_right(version, cow_version)
        if balance < -1:
            assert self.right is not None
            if _calc_balance(self.right) <= 0:
                return self._rotate_left(version, cow_version)
            self.right = self.right.mutate(version, cow_version)._rotate_right(version, cow_version)
            return self._rotate_left(version, cow_version)
        return self

    def get(self, key: bytes) -> tuple[Optional[bytes], int]:
        """Return the value for ``key`` (or ``None``) and its leaf index."""
        if self.is_leaf:
            if self.key < key:
                return None, 1
            if self.key > key:
                return None, 0
            return self.value, 0
        assert self.left is not None and self.right is not None
        if key < self.key:
            return self.left.get(key)
        right = self.right
        value, index = right.get(key)
        return value, index + self.size - right.size

    def get_by_index(self, index: int) -> tuple[Optional[bytes], Optional[bytes]]:
        """Return the key and value of the leaf at ``index``."""
        if self.is_leaf:
            if index == 0:
                return self.key, self.value
            return None, None
        assert self.left is not None and self.right is not None
        left_size = self.left.size
        if index < left_size:
            return self.left.get_by_index(index)
        return self.right.get_by_index(index - left_size)


def _calc_balance(node: Node) -> int:
    assert node.left is not None and node.right is not None
    return node.left.height - node.right.height


def new_leaf_node(key: bytes, value: Optional[bytes], version: int) -> MemNode:
    """Create a leaf node."""
    return MemNode(key=key, value=value, version=version, size=1)


def set_recursive(
    node: Optional[Node], key: bytes, value: bytes, version: int, cow_version: int
) -> tuple[MemNode, bool]:
    """Set ``key`` to ``value`` under ``node``.

    Returns the new subtree root and whether it was an update of an
    existing key (in which case height and balance are unchanged).
    """
    if node is None:
        return new_leaf_node(key, value, version), True

    node_key = node.key
    if node.is_leaf:
        if key < node_key:
            return (
                MemNode(
                    height=1,
                    size=2,
                    version=version,
                    key=node_key,
                    left=new_leaf_node(key, value, version),
                    right=node,
                ),
                False,
            )
        if key > node_key:
            return (
                MemNode(
                    height=1,
                    size=2,
                    version=version,
                    key=key,
                    left=node,
                    right=new_leaf_node(key, value, version),
                ),
                False,
            )
        new_node = node.mutate(version, cow_version)
        new_node.value = value
        return new_node, True

    if key < node_key:
        new_child, updated = set_recursive(node.left, key, value, version, cow_version)
        new_node = node.mutate(version, cow_version)
        new_node.left = new_child
    else:
        new_child, updated = set_recursive(node.right, key, value, version, cow_version)
        new_node = node.mutate(version, cow_version)
        new_node.right = new_child

    if not updated:
        new_node._update_height_size()
        new_node = new_node._rebalance(version, cow_version)
    return new_node, updated


def remove_recursive(
    node: Optional[Node], key: bytes, version: int, cow_version: int
) -> tuple[Optional[bytes], Optional[Node], Optional[bytes]]:
    """Remove ``key`` under ``node``.

    Returns ``(None, node, None)`` when nothing changed,
    ``(value, None, new_key)`` when the leaf itself was removed, and
    ``(value, new_node, new_key)`` when the subtree changed.
    """
    if node is None:
        return None, None, None

    if node.is_leaf:
        if node.key == key:
            return node.value, None, None
        return None, node, None

    if key < node.key:
        value, new_left, new_key = remove_recursive(node.left, key, version, cow_version)
        if value is None:
            return None, node, None
        if new_left is None:
            return value, node.right, node.key
        new_node = node.mutate(version, cow_version)
        new_node.left = new_left
        new_node._update_height_size()
        return value, new_node._rebalance(version, cow_version), new_key

    value, new_right, new_key = remove_recursive(node.right, key, version, cow_version)
    if value is None:
        return None, node, None
    if new_right is None:
        return value, node.left, None

    new_node = node.mutate(version, cow_version)
    new_node.right = new_right
    if new_key is not None:
        new_node.key = new_key
    new_node._update_height_size()
    return value, new_node._rebalance(version, cow_version), None


def _uvarint(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _varint(value: int) -> bytes:
    zigzag = value << 1 if value >= 0 else ((~value) << 1) | 1
    return _uvarint(zigzag)


def encode_bytes(key: bytes) -> bytes:
    """Encode a byte string with a uvarint length prefix."""
    return _uvarint(len(key)) + bytes(key)


def _hash_bytes(node: Node) -> bytes:
    parts = [_varint(node.height), _varint(node.size), _varint(node.version)]
    if node.is_leaf:
        parts.append(encode_bytes(node.key))
        value_hash = hashlib.sha256(bytes(node.value or b"")).digest()
        parts.append(encode_bytes(value_hash))
    else:
        assert node.left is not None and node.right is not None
        parts.append(encode_bytes(node.left.hash() or b""))
        parts.append(encode_bytes(node.right.hash() or b""))
    return b"".join(parts)


def hash_node(node: Optional[Node]) -> Optional[bytes]:
    """Compute the hash of ``node`` from its fields and its children's hashes."""
    if node is None:
        return None
    return hashlib.sha256(_hash_bytes(node)).digest()


def verify_hash(node: Node) -> bool:
    """Check the node's cached hash against a freshly computed one."""
    return hash_node(node) == node.hash()