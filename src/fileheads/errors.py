from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class FileHeadsError(RuntimeError):
    """Base error for the file-backed head store."""


class NotADirectory(FileHeadsError):
    """The store path does not exist or is not a directory."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"'{path}' is not a directory")
        self.path = path


class KeyEncodeError(FileHeadsError):
    """A key could not be turned into its filename form."""

    def __init__(self, key: Any, reason: str) -> None:
        super().__init__(f"cannot encode key {key!r}: {reason}")
        self.key = key


class KeyDecodeError(FileHeadsError):
    """A prefixed filename could not be parsed back into a key."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"cannot decode head file {name!r}: {reason}")
        self.name = name


class HeadsIOError(FileHeadsError):
    """
    OS-level failure while touching the store directory.

    The original `OSError` is kept on `os_error` and chained as `__cause__`.
    """

    def __init__(self, message: str, os_error: Optional[OSError] = None) -> None:
        super().__init__(message)
        self.os_error = os_error


class DirectoryListingError(HeadsIOError):
    """Listing the store directory failed."""
