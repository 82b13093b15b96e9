"""Commit identifiers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CommitID:
    """A version together with the root hash committed at it."""

    version: int = 0
    hash: bytes = b""

    def __str__(self) -> str:
        hash_text = " ".join(str(byte) for byte in self.hash)
        return f"CommitID{{[{hash_text}]:{self.version:X}}}"