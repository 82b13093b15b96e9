"""Byte, path and version helpers."""

from __future__ import annotations

import os

_UINT64_MASK = (1 << 64) - 1


def _to_int64(value: int) -> int:
    value &= _UINT64_MASK
    return value - (1 << 64) if value >= 1 << 63 else value


def clone(b: bytes | bytearray | None) -> bytes | None:
    """Return a copy of ``b``; ``None`` stays ``None``."""
    if b is None:
        return None
    return bytes(b)


def equal(a: bytes | bytearray | None, b: bytes | bytearray | None) -> bool:
    """Compare two byte strings, treating ``None`` as empty."""
    return bytes(a or b"") == bytes(b or b"")


def get_commit_store_path(home_path: str) -> str:
    """Directory of the commit store under the application home."""
    return os.path.join(home_path, "data", "committer.db")


def get_state_store_path(home_path: str, backend: str) -> str:
    """Directory of the state store for ``backend`` under the application home."""
    return os.path.join(home_path, "data", backend)


def get_changelog_path(db_path: str) -> str:
    """Directory of the changelog inside a database directory."""
    return os.path.join(db_path, "changelog")


def next_version(v: int, initial_version: int) -> int:
    """Version that follows ``v``, honouring the initial version."""
    if v == 0 and initial_version > 1:
        return initial_version
    return v + 1


def version_to_index(version: int, initial_version: int) -> int:
    """Convert a version to a changelog index."""
    if initial_version > 1:
        return (version - initial_version + 1) & _UINT64_MASK
    return version & _UINT64_MASK


def index_to_version(index: int, initial_version: int) -> int:
    """Convert a changelog index back to a version."""
    if initial_version > 1:
        return _to_int64(_to_int64(index) + initial_version - 1)
    return _to_int64(index)