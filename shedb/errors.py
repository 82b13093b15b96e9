"""Error types shared by the stores."""

from __future__ import annotations


class KeyEmptyError(ValueError):
    """Raised when a key is empty."""

    def __init__(self, message: str = "key empty") -> None:
        super().__init__(message)


class RecordNotFoundError(KeyError):
    """Raised when a record does not exist."""

    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)

    def __str__(self) -> str:
        return str(self.args[0])


class StartAfterEndError(ValueError):
    """Raised when an iteration range starts after its end."""

    def __init__(self, message: str = "start key after end key") -> None:
        super().__init__(message)


class ExportDone(Exception):
    """Signals that an export has produced all of its items."""

    def __init__(self, message: str = "export is complete") -> None:
        super().__init__(message)


class _JoinedError(Exception):
    """Several errors reported together."""

    def __init__(self, errors: list[BaseException]) -> None:
        self.errors = errors
        super().__init__("\n".join(text for text in map(str, errors) if text))

    def __str__(self) -> str:
        return str(self.args[0])


def join(*args: BaseException | None) -> Exception | None:
    """Combine errors into one, skipping ``None``.

    Returns ``None`` when no error is given. The message is the non-empty
    messages of the given errors, one per line.
    """
    errors = [err for err in args if err is not None]
    if not errors:
        return None
    return _JoinedError(errors)