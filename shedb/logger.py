"""Logging interface used by the stores."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Logger(Protocol):
    """Anything that can log messages with trailing key/value pairs."""

    def debug(self, msg: str, *args: Any) -> None: ...

    def info(self, msg: str, *args: Any) -> None: ...

    def error(self, msg: str, *args: Any) -> None: ...


def _silent_logger() -> logging.Logger:
    sink = logging.Logger("shedb.nop")
    sink.addHandler(logging.NullHandler())
    sink.propagate = False
    sink.setLevel(logging.CRITICAL + 1)
    return sink


class NopLogger:
    """A logger that discards every message."""

    def __init__(self) -> None:
        self._sink = _silent_logger()

    def debug(self, msg: str, *args: Any) -> None:
        """Discard a debug message."""
        self._sink.debug(msg, extra={"keyvals": args})

    def info(self, msg: str, *args: Any) -> None:
        """Discard an info message."""
        self._sink.info(msg, extra={"keyvals": args})

    def error(self, msg: str, *args: Any) -> None:
        """Discard an error message."""
        self._sink.error(msg, extra={"keyvals": args})


def new_nop_logger() -> Logger:
    """Return a logger that does nothing."""
    return NopLogger()