"""Configuration for the state-commit and state-store layers."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_SNAPSHOT_INTERVAL = 10000
DEFAULT_SNAPSHOT_KEEP_RECENT = 1
DEFAULT_SNAPSHOT_WRITER_LIMIT = 1
DEFAULT_ASYNC_COMMIT_BUFFER = 100
DEFAULT_CACHE_SIZE = 100000
DEFAULT_SS_KEEP_RECENT = 100000
DEFAULT_SS_PRUNE_INTERVAL = 600
DEFAULT_SS_IMPORT_WORKERS = 1
DEFAULT_SS_ASYNC_BUFFER = 100


@dataclass
class StateCommitConfig:
    """Settings of the state-commit store.

    ``async_commit_buffer`` <= 0 means synchronous commit.
    ``cache_size`` is deprecated and kept only for compatibility.
    """

    enable: bool = False
    directory: str = ""
    zero_copy: bool = False
    async_commit_buffer: int = 0
    snapshot_keep_recent: int = 0
    snapshot_interval: int = 0
    snapshot_writer_limit: int = 0
    cache_size: int = 0


@dataclass
class StateStoreConfig:
    """Settings of the state store used for historical queries.

    ``keep_recent`` of 0 keeps every version; ``async_write_buffer`` <= 0
    means synchronous writes.
    """

    enable: bool = False
    db_directory: str = ""
    dedicated_changelog: bool = False
    backend: str = ""
    async_write_buffer: int = 0
    keep_recent: int = 0
    prune_interval_seconds: int = 0
    import_num_workers: int = 0
    keep_last_version: bool = False


def default_state_commit_config() -> StateCommitConfig:
    """Return the state-commit configuration with its documented defaults."""
    return StateCommitConfig(
        async_commit_buffer=DEFAULT_ASYNC_COMMIT_BUFFER,
        cache_size=DEFAULT_CACHE_SIZE,
        snapshot_interval=DEFAULT_SNAPSHOT_INTERVAL,
        snapshot_keep_recent=DEFAULT_SNAPSHOT_KEEP_RECENT,
    )


def default_state_store_config() -> StateStoreConfig:
    """Return the state-store configuration with its documented defaults."""
    return StateStoreConfig(
        backend="pebbledb",
        async_write_buffer=DEFAULT_SS_ASYNC_BUFFER,
        keep_recent=DEFAULT_SS_KEEP_RECENT,
        prune_interval_seconds=DEFAULT_SS_PRUNE_INTERVAL,
        import_num_workers=DEFAULT_SS_IMPORT_WORKERS,
        keep_last_version=True,
    )


@dataclass(frozen=True)
class _Entry:
    key: str
    attribute: str
    quoted: bool
    notes: tuple[str, ...]


_STATE_COMMIT_ENTRIES = (
    _Entry("sc-enable", "enable", False,
           ("Turn on the state-commit store in place of the default tree backend.",)),
    _Entry("sc-directory", "directory", True,
           ("Where the state-commit store lives; empty means the application home.",)),
    _Entry("sc-zero-copy", "zero_copy", False,
           ("Return values that point straight into memory-mapped files.",
            "Such values are only valid while the current block executes.")),
    _Entry("sc-async-commit-buffer", "async_commit_buffer", False,
           ("Length of the asynchronous commit queue; 0 commits synchronously.",)),
    _Entry("sc-keep-recent", "snapshot_keep_recent", False,
           ("Number of older snapshots kept next to the newest one.",)),
    _Entry("sc-snapshot-interval", "snapshot_interval", False,
           ("Number of blocks between two snapshots.",)),
    _Entry("sc-snapshot-writer-limit", "snapshot_writer_limit", False,
           ("Upper bound on concurrent snapshot writers.",)),
)

_STATE_STORE_ENTRIES = (
    _Entry("ss-enable", "enable", False,
           ("Keep historical data for queries and state exports.",
            "Only used when the state-commit store is enabled.")),
    _Entry("ss-db-directory", "db_directory", True,
           ("Where the state store files live; empty means the application home.",)),
    _Entry("ss-backend", "backend", True,
           ("Storage engine for the state store: pebbledb or rocksdb.",)),
    _Entry("ss-async-write-buffer", "async_write_buffer", False,
           ("Length of the queue of commits waiting to reach the state store.",
            "A value <= 0 makes every commit wait for the write.")),
    _Entry("ss-keep-recent", "keep_recent", False,
           ("Number of versions retained; 0 retains all of them.",)),
    _Entry("ss-prune-interval", "prune_interval_seconds", False,
           ("Minimum number of seconds between pruning runs.",)),
    _Entry("ss-import-num-workers", "import_num_workers", False,
           ("Number of workers used when importing a state-sync snapshot.",)),
)

_BANNER = "#" * 77


def _value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _render_section(name: str, entries: tuple[_Entry, ...], source: object) -> list[str]:
    lines = [f"[{name}]"]
    for entry in entries:
        lines.extend(f"# {note}" for note in entry.notes)
        text = _value(getattr(source, entry.attribute))
        if entry.quoted:
            text = f'"{text}"'
        lines.append(f"{entry.key} = {text}")
        lines.append("")
    return lines


def render_config(state_commit: StateCommitConfig, state_store: StateStoreConfig) -> str:
    """Render both configurations as the TOML section of the app config."""
    lines = [
        "",
        _BANNER,
        "###" + "SheDB Configuration".center(71) + "###",
        _BANNER,
        "",
    ]
    lines.extend(_render_section("state-commit", _STATE_COMMIT_ENTRIES, state_commit))
    lines.extend(_render_section("state-store", _STATE_STORE_ENTRIES, state_store))
    return "\n".join(lines) + "\n"