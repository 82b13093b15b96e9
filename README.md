# shedb

Core pieces of a memory-resident IAVL (immutable AVL) state-commit store.

## Modules

- `shedb.node` — copy-on-write AVL nodes (`MemNode`), recursive insert and
  remove with rebalancing (`set_recursive`, `remove_recursive`), and SHA-256
  node hashing (`hash_node`, `verify_hash`, `encode_bytes`). `MemNode.get`
  returns a value and its leaf index; `MemNode.get_by_index` returns the key
  and value at a leaf index.
- `shedb.iterator` — `Iterator(start, end, ascending, root, zero_copy)` walks
  the leaves in `[start, end)` in either direction. `None` bounds are open.
  It has `valid()`, `key()`, `value()`, `next()`, `close()` and `domain()`,
  and can be used in a `for` loop, yielding `(key, value)` pairs.
- `shedb.layout` — fixed-size (48-byte) little-endian records for persisted
  branch and leaf nodes: `Nodes`, `Leaves`, `NodeLayout`, `LeafLayout`,
  `encode_branch`, `encode_leaf`, and the index helpers `get_start_leaf`,
  `get_end_leaf`, `get_left_branch`.
- `shedb.proof` — existence and non-existence proofs
  (`create_existence_proof`, `create_non_existence_proof`) and their
  verification (`verify_membership`, `verify_non_membership`), built from
  `LeafOp`, `InnerOp`, `ExistenceProof`, `NonExistenceProof` and
  `ProofInnerNode`.
- `shedb.opts` — `Options` for opening a commit store, with `validate()`
  (raises `ValueError` for read-only combined with creation or rollback) and
  `fill_defaults()`.
- `shedb.config` — `StateCommitConfig` and `StateStoreConfig`, their defaults
  (`default_state_commit_config`, `default_state_store_config`) and a TOML
  rendering (`render_config`).
- `shedb.utils` — byte helpers (`clone`, `equal`), standard paths
  (`get_commit_store_path`, `get_state_store_path`, `get_changelog_path`) and
  version/changelog-index conversion (`next_version`, `version_to_index`,
  `index_to_version`).
- `shedb.commit_info` — `CommitID`, a version with its root hash.
- `shedb.errors` — `KeyEmptyError`, `RecordNotFoundError`,
  `StartAfterEndError`, `ExportDone`, and `join()` to combine several errors
  into one (returns `None` when none are given).
- `shedb.logger` — the `Logger` protocol and `NopLogger` / `new_nop_logger()`,
  a logger that discards everything.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from shedb.node import set_recursive, hash_node
from shedb.iterator import Iterator
from shedb.proof import (
    create_existence_proof,
    create_non_existence_proof,
    verify_membership,
    verify_non_membership,
)

root = None
for key in (b"a", b"b", b"c"):
    root, _ = set_recursive(root, key, b"value-" + key, 1, 0)

print(list(Iterator(None, None, True, root, False)))

root_hash = hash_node(root)
proof = create_existence_proof(root, b"b")
assert verify_membership(proof, root_hash, b"b", b"value-b")

absent = create_non_existence_proof(root, b"bb")
assert verify_non_membership(absent, root_hash, b"bb")
```

Configuration with defaults:

```python
from shedb.config import default_state_commit_config, default_state_store_config, render_config

print(render_config(default_state_commit_config(), default_state_store_config()))
```

## What this package does not do

There is no database object here: nothing opens a store directory, commits
versions, writes or loads snapshot files, keeps a changelog, takes a file
lock, or imports and exports state. `Options` and the configuration classes
describe such a store but are not acted on by anything in the package. Trees
are built and queried through the node functions directly, and `shedb.layout`
only encodes and reads node records in memory.