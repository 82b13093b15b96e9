"""Options for opening a commit store."""

from __future__ import annotations

from dataclasses import dataclass, field

from shedb.config import (
    DEFAULT_CACHE_SIZE,
    DEFAULT_SNAPSHOT_INTERVAL,
    DEFAULT_SNAPSHOT_WRITER_LIMIT,
)


@dataclass
class Options:
    """How a commit store is opened.

    ``async_commit_buffer`` of -1 means synchronous commit.
    ``load_for_overwriting`` rolls the store back to the target version;
    it does nothing when the target version is 0.
    """

    dir: str = ""
    create_if_missing: bool = False
    initial_version: int = 0
    read_only: bool = False
    initial_stores: list[str] = field(default_factory=list)
    snapshot_keep_recent: int = 0
    snapshot_interval: int = 0
    async_commit_buffer: int = 0
    zero_copy: bool = False
    cache_size: int = 0
    load_for_overwriting: bool = False
    snapshot_writer_limit: int = 0

    def validate(self) -> None:
        """Raise ``ValueError`` for contradictory options."""
        if self.read_only and self.create_if_missing:
            raise ValueError("can't create db in read-only mode")
        if self.read_only and self.load_for_overwriting:
            raise ValueError("can't rollback db in read-only mode")

    def fill_defaults(self) -> None:
        """Replace unset values with their defaults."""
        if self.snapshot_interval <= 0:
            self.snapshot_interval = DEFAULT_SNAPSHOT_INTERVAL
        if self.snapshot_writer_limit <= 0:
            self.snapshot_writer_limit = DEFAULT_SNAPSHOT_WRITER_LIMIT
        if self.cache_size < 0:
            self.cache_size = DEFAULT_CACHE_SIZE