import pytest

from shedb.errors import RecordNotFoundError
from shedb.node import hash_node, new_leaf_node, remove_recursive, set_recursive
from shedb.proof import (
    ExistenceProof,
    InnerOp,
    NonExistenceProof,
    ProofInnerNode,
    convert_inner_ops,
    convert_leaf_op,
    create_existence_proof,
    create_non_existence_proof,
    encode_varint,
    path_to_leaf,
    verify_membership,
    verify_non_membership,
)

STEPS = [
    ([(b"hello", b"world")], []),
    ([(b"hello1", b"world1")], []),
    ([(b"hello2", b"world2")], []),
    ([(b"hello00", b"world00")], []),
    ([], [b"hello"]),
    ([(b"aello00", b"world00")], []),
    ([], [b"aello00"]),
]

CASES = [
    (b"hello", b"hello1"),
    (b"hello1", b"hello2"),
    (b"hello2", b"hell"),
    (b"hello00", b"hell"),
    (b"hello00", b"hello"),
    (b"aello00", b"hello"),
    (b"hello1", b"aello00"),
]


def _build(count):
    root = None
    for version, (sets, deletes) in enumerate(STEPS[:count], start=1):
        for key, value in sets:
            root, _ = set_recursive(root, key, value, version, version - 1)
        for key in deletes:
            removed, root, _ = remove_recursive(root, key, version, version - 1)
            assert removed is not None
    return root


def _tree(keys, version=1):
    root = None
    for key in keys:
        root, _ = set_recursive(root, key, b"v" + key, version, version - 1)
    return root


@pytest.mark.parametrize("index", range(len(CASES)))
def test_proofs(index):
    exist_key, non_exist_key = CASES[index]
    root = _build(index + 1)
    root_hash = root.hash()

    value, _ = root.get(exist_key)
    proof = create_existence_proof(root, exist_key)
    assert verify_membership(proof, root_hash, exist_key, value)

    non_proof = create_non_existence_proof(root, non_exist_key)
    assert verify_non_membership(non_proof, root_hash, non_exist_key)


def test_leaf_op_matches_known_hashes():
    assert (
        convert_leaf_op(1).apply(b"hello", b"world").hex()
        == "6032661ab0d201132db7a8fa1da6a0afe427e6278bd122c301197680ab79ca02"
    )
    assert (
        convert_leaf_op(2).apply(b"hello", b"world1").hex()
        == "ef0530f9bf1af56c19a3bac32a3ec4f76a6fefaacb2efd4027a2cf37240f60bb"
    )


def test_leaf_op_agrees_with_node_hash():
    assert convert_leaf_op(7).apply(b"abc", b"xyz") == hash_node(new_leaf_node(b"abc", b"xyz", 7))


def test_calculate_reaches_root_hash():
    root = _tree([b"key%03d" % i for i in range(20)])
    for i in range(20):
        key = b"key%03d" % i
        assert create_existence_proof(root, key).calculate() == root.hash()


def test_many_keys_membership_and_non_membership():
    keys = [b"key%03d" % i for i in range(50)]
    root = _tree(keys)
    root_hash = root.hash()
    for key in keys:
        proof = create_existence_proof(root, key)
        assert verify_membership(proof, root_hash, key, b"v" + key)
        missing = key + b"a"
        assert verify_non_membership(create_non_existence_proof(root, missing), root_hash, missing)
    for edge in (b"a", b"zzz"):
        assert verify_non_membership(create_non_existence_proof(root, edge), root_hash, edge)


def test_wrong_value_or_root_fails():
    root = _tree([b"a", b"b", b"c"])
    proof = create_existence_proof(root, b"b")
    assert not verify_membership(proof, root.hash(), b"b", b"other")
    assert not verify_membership(proof, b"\x00" * 32, b"b", b"vb")
    assert not verify_membership(proof, root.hash(), b"c", b"vb")


def test_non_membership_for_present_key_raises():
    root = _tree([b"a", b"b"])
    with pytest.raises(ValueError):
        create_non_existence_proof(root, b"a")


def test_membership_for_absent_key_raises():
    root = _tree([b"a", b"b"])
    with pytest.raises(RecordNotFoundError):
        create_existence_proof(root, b"c")
    with pytest.raises(RecordNotFoundError):
        path_to_leaf(None, b"a")


def test_non_neighbours_rejected():
    root = _tree([b"a", b"b", b"c"])
    root_hash = root.hash()
    good = NonExistenceProof(
        key=b"b0",
        left=create_existence_proof(root, b"b"),
        right=create_existence_proof(root, b"c"),
    )
    assert verify_non_membership(good, root_hash, b"b0")
    gapped = NonExistenceProof(
        key=b"b0",
        left=create_existence_proof(root, b"a"),
        right=create_existence_proof(root, b"c"),
    )
    assert not verify_non_membership(gapped, root_hash, b"b0")


def test_non_membership_proof_for_other_key_fails():
    root = _tree([b"a", b"c", b"e"])
    proof = create_non_existence_proof(root, b"b")
    assert verify_non_membership(proof, root.hash(), b"b")
    assert not verify_non_membership(proof, root.hash(), b"d")


def test_empty_tree_non_membership_is_not_provable():
    proof = create_non_existence_proof(None, b"key")
    assert proof.left is None and proof.right is None
    assert not verify_non_membership(proof, b"\x00" * 32, b"key")


def test_single_leaf_tree():
    root = _tree([b"hello"])
    path, leaf = path_to_leaf(root, b"hello")
    assert path == []
    assert leaf.key == b"hello"
    assert verify_non_membership(create_non_existence_proof(root, b"hell"), root.hash(), b"hell")
    assert verify_non_membership(create_non_existence_proof(root, b"hellp"), root.hash(), b"hellp")


def test_encode_varint_zigzag():
    assert encode_varint(0) == b"\x00"
    assert encode_varint(1) == b"\x02"
    assert encode_varint(-1) == b"\x01"
    assert encode_varint(64) == b"\x80\x01"


def test_convert_inner_ops_orders_leaf_first():
    left_hash = b"\x11" * 32
    right_hash = b"\x22" * 32
    path = [
        ProofInnerNode(height=2, size=3, version=1, left=left_hash, right=None),
        ProofInnerNode(height=1, size=2, version=1, left=None, right=right_hash),
    ]
    ops = convert_inner_ops(path)
    assert len(ops) == 2
    assert ops[0].suffix == b"\x20" + right_hash
    assert ops[0].prefix.endswith(b"\x20")
    assert ops[1].suffix == b""
    assert ops[1].prefix.endswith(b"\x20" + left_hash + b"\x20")


def test_ops_reject_empty_input():
    with pytest.raises(ValueError):
        convert_leaf_op(1).apply(b"", b"value")
    with pytest.raises(ValueError):
        convert_leaf_op(1).apply(b"key", b"")
    with pytest.raises(ValueError):
        InnerOp(prefix=b"\x02\x04\x02\x20").apply(b"")


def test_tampered_path_fails():
    root = _tree([b"a", b"b", b"c", b"d"])
    proof = create_existence_proof(root, b"b")
    tampered = ExistenceProof(
        key=proof.key,
        value=proof.value,
        leaf=proof.leaf,
        path=[InnerOp(prefix=op.prefix, suffix=op.suffix[:-1] + b"\xff") if op.suffix else op
              for op in proof.path],
    )
    if any(op.suffix for op in proof.path):
        assert not verify_membership(tampered, root.hash(), b"b", b"vb")
    assert verify_membership(proof, root.hash(), b"b", b"vb")