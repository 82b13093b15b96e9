"""Existence and non-existence proofs over a tree, and their verification."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Optional

from shedb.errors import RecordNotFoundError
from shedb.node import Node, encode_bytes

# Length prefix put before each 32-byte child hash.
_LENGTH_BYTE = 0x20

# Shape of the tree as far as proof verification is concerned.
_LEAF_PREFIX = b"\x00"
_CHILD_ORDER = (0, 1)
_CHILD_SIZE = 33
_MIN_PREFIX_LENGTH = 4
_MAX_PREFIX_LENGTH = 12


def _sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def encode_varint(value: int) -> bytes:
    """Zig-zag encode a signed integer as a varint."""
    zigzag = value << 1 if value >= 0 else ((~value) << 1) | 1
    out = bytearray()
    while zigzag >= 0x80:
        out.append((zigzag & 0x7F) | 0x80)
        zigzag >>= 7
    out.append(zigzag)
    return bytes(out)


def _read_varint(data: bytes, pos: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint")
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        if byte < 0x80:
            break
        shift += 7
        if shift >= 70:
            raise ValueError("varint overflows")
    return (result >> 1) ^ -(result & 1), pos


@dataclass
class ProofInnerNode:
    """One branch on the path from the root to a leaf.

    Exactly one of ``left`` and ``right`` holds the sibling's hash.
    """

    height: int
    size: int
    version: int
    left: Optional[bytes] = None
    right: Optional[bytes] = None


@dataclass
class LeafOp:
    """Hashes a key/value pair into a leaf hash.

    The value is pre-hashed with SHA-256 and both parts are length prefixed.
    """

    prefix: bytes

    def apply(self, key: bytes, value: bytes) -> bytes:
        if not key:
            raise ValueError("leaf op needs key")
        if not value:
            raise ValueError("leaf op needs value")
        data = self.prefix + encode_bytes(key) + encode_bytes(_sha256(value))
        return _sha256(data)


@dataclass
class InnerOp:
    """Hashes a child hash together with its sibling into the parent hash."""

    prefix: bytes
    suffix: bytes = b""

    def apply(self, child: bytes) -> bytes:
        if not child:
            raise ValueError("inner op needs child value")
        return _sha256(self.prefix + child + self.suffix)


@dataclass
class ExistenceProof:
    """Proof that ``key`` holds ``value`` under some root hash."""

    key: bytes
    value: bytes
    leaf: LeafOp
    path: list[InnerOp] = field(default_factory=list)

    def calculate(self) -> bytes:
        """Compute the root hash this proof leads to."""
        result = self.leaf.apply(self.key, self.value)
        for step in self.path:
            result = step.apply(result)
        return result


@dataclass
class NonExistenceProof:
    """Proof that ``key`` is absent: its neighbours on either side exist."""

    key: bytes
    left: Optional[ExistenceProof] = None
    right: Optional[ExistenceProof] = None


def path_to_leaf(node: Optional[Node], key: bytes) -> tuple[list[ProofInnerNode], Node]:
    """Walk from ``node`` to the leaf holding ``key``.

    Returns the branches passed (root first) and the leaf.
    Raises ``RecordNotFoundError`` if the key is not in the tree.
    """
    if node is None:
        raise RecordNotFoundError("key does not exist")
    path: list[ProofInnerNode] = []
    while node.height != 0:
        assert node.left is not None and node.right is not None
        if key < node.key:
            path.append(
                ProofInnerNode(node.height, node.size, node.version, None, node.right.hash())
            )
            node = node.left
        else:
            path.append(
                ProofInnerNode(node.height, node.size, node.version, node.left.hash(), None)
            )
            node = node.right
    if node.key != key:
        raise RecordNotFoundError("key does not exist")
    return path, node


def convert_leaf_op(version: int) -> LeafOp:
    """Leaf operation for a leaf created at ``version``."""
    prefix = encode_varint(0) + encode_varint(1) + encode_varint(version)
    return LeafOp(prefix=prefix)


def convert_inner_ops(path: list[ProofInnerNode]) -> list[InnerOp]:
    """Turn a root-first path into leaf-first inner operations."""
    length = bytes([_LENGTH_BYTE])
    ops = []
    for step in reversed(path):
        prefix = (
            encode_varint(step.height) + encode_varint(step.size) + encode_varint(step.version)
        )
        if step.left:
            prefix += length + step.left + length
            suffix = b""
        else:
            prefix += length
            suffix = length + (step.right or b"")
        ops.append(InnerOp(prefix=prefix, suffix=suffix))
    return ops


def create_existence_proof(root: Optional[Node], key: bytes) -> ExistenceProof:
    """Build a proof that ``key`` exists under ``root``."""
    path, leaf = path_to_leaf(root, key)
    return ExistenceProof(
        key=leaf.key,
        value=leaf.value or b"",
        leaf=convert_leaf_op(leaf.version),
        path=convert_inner_ops(path),
    )


def create_non_existence_proof(root: Optional[Node], key: bytes) -> NonExistenceProof:
    """Build a proof that ``key`` is absent under ``root``.

    Raises ``ValueError`` if the key is present.
    """
    proof = NonExistenceProof(key=key)
    if root is None:
        return proof
    value, index = root.get(key)
    if value is not None:
        raise ValueError("cannot create non-existence proof when key is in state")
    if index >= 1:
        left_key, _ = root.get_by_index(index - 1)
        if left_key is not None:
            proof.left = create_existence_proof(root, left_key)
    right_key, _ = root.get_by_index(index)
    if right_key is not None:
        proof.right = create_existence_proof(root, right_key)
    return proof


def _validate_prefix_header(prefix: bytes, layer: int) -> None:
    pos = 0
    values = []
    for _ in range(3):
        value, pos = _read_varint(prefix, pos)
        if value < 0:
            raise ValueError("negative value in op prefix")
        values.append(value)
    if values[0] < layer:
        raise ValueError("height too small for layer")
    remaining = len(prefix) - pos
    if layer == 0:
        if remaining != 0:
            raise ValueError("leaf op prefix has trailing bytes")
    elif remaining not in (1, 2 + SIZE_CHILD_HASH):
        raise ValueError("invalid inner op prefix")


SIZE_CHILD_HASH = 32


def _check_leaf_op(op: LeafOp) -> None:
    if not op.prefix.startswith(_LEAF_PREFIX):
        raise ValueError("leaf prefix does not match spec")
    _validate_prefix_header(op.prefix, 0)


def _check_inner_op(op: InnerOp, layer: int) -> None:
    _validate_prefix_header(op.prefix, layer)
    if op.prefix.startswith(_LEAF_PREFIX):
        raise ValueError("inner prefix starts with leaf prefix")
    if len(op.prefix) < _MIN_PREFIX_LENGTH:
        raise ValueError("inner prefix too short")
    max_left_child_bytes = (len(_CHILD_ORDER) - 1) * _CHILD_SIZE
    if len(op.prefix) > _MAX_PREFIX_LENGTH + max_left_child_bytes:
        raise ValueError("inner prefix too long")
    if len(op.suffix) % _CHILD_SIZE != 0:
        raise ValueError("inner suffix has wrong length")


def _check_existence(
    proof: ExistenceProof, root_hash: bytes, key: bytes, value: Optional[bytes]
) -> None:
    if proof.key != key:
        raise ValueError("proof is for another key")
    if proof.value != (value or b""):
        raise ValueError("proof is for another value")
    _check_leaf_op(proof.leaf)
    for layer, step in enumerate(proof.path, start=1):
        _check_inner_op(step, layer)
    if proof.calculate() != root_hash:
        raise ValueError("calculated root does not match")


def _padding(branch: int) -> tuple[int, int, int]:
    idx = _CHILD_ORDER.index(branch)
    prefix = idx * _CHILD_SIZE
    suffix = (len(_CHILD_ORDER) - 1 - idx) * _CHILD_SIZE
    return prefix + _MIN_PREFIX_LENGTH, prefix + _MAX_PREFIX_LENGTH, suffix


def _has_padding(op: InnerOp, min_prefix: int, max_prefix: int, suffix: int) -> bool:
    return min_prefix <= len(op.prefix) <= max_prefix and len(op.suffix) == suffix


def _order_from_padding(op: InnerOp) -> Optional[int]:
    for branch in range(len(_CHILD_ORDER)):
        if _has_padding(op, *_padding(branch)):
            return branch
    return None


def _is_left_most(path: list[InnerOp]) -> bool:
    padding = _padding(_CHILD_ORDER[0])
    return all(_has_padding(step, *padding) for step in path)


def _is_right_most(path: list[InnerOp]) -> bool:
    padding = _padding(_CHILD_ORDER[-1])
    return all(_has_padding(step, *padding) for step in path)


def _is_left_neighbor(left: list[InnerOp], right: list[InnerOp]) -> bool:
    left = list(left)
    right = list(right)
    if not left or not right:
        return False
    top_left, top_right = left.pop(), right.pop()
    while top_left.prefix == top_right.prefix and top_left.suffix == top_right.suffix:
        if not left or not right:
            return False
        top_left, top_right = left.pop(), right.pop()
    left_idx = _order_from_padding(top_left)
    right_idx = _order_from_padding(top_right)
    if left_idx is None or right_idx is None or right_idx != left_idx + 1:
        return False
    return _is_right_most(left) and _is_left_most(right)


def _check_non_existence(proof: NonExistenceProof, root_hash: bytes, key: bytes) -> None:
    if proof.left is None and proof.right is None:
        raise ValueError("both left and right proofs are missing")
    if proof.left is not None:
        _check_existence(proof.left, root_hash, proof.left.key, proof.left.value)
    if proof.right is not None:
        _check_existence(proof.right, root_hash, proof.right.key, proof.right.value)
    if proof.right is not None and key >= proof.right.key:
        raise ValueError("key is not left of right proof")
    if proof.left is not None and key <= proof.left.key:
        raise ValueError("key is not right of left proof")
    if proof.left is None:
        assert proof.right is not None
        if not _is_left_most(proof.right.path):
            raise ValueError("left proof missing, right proof must be left-most")
    elif proof.right is None:
        if not _is_right_most(proof.left.path):
            raise ValueError("right proof missing, left proof must be right-most")
    elif not _is_left_neighbor(proof.left.path, proof.right.path):
        raise ValueError("left and right proofs are not neighbours")


def verify_membership(
    proof: ExistenceProof, root_hash: bytes, key: bytes, value: Optional[bytes]
) -> bool:
    """Whether ``proof`` shows that ``key`` holds ``value`` under ``root_hash``."""
    try:
        _check_existence(proof, root_hash, key, value)
    except ValueError:
        return False
    return True


def verify_non_membership(proof: NonExistenceProof, root_hash: bytes, key: bytes) -> bool:
    """Whether ``proof`` shows that ``key`` is absent under ``root_hash``."""
    if proof.key != key:
        return False
    try:
        _check_non_existence(proof, root_hash, key)
    except ValueError:
        return False
    return True