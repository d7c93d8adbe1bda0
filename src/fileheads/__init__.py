"""
File-backed head store.

Heads are kept as empty `head:<encoded key>` marker files in a directory and
every filesystem call is dispatched to a thread pool.
"""

from .codec import KeyCodec
from .errors import (
    DirectoryListingError,
    FileHeadsError,
    HeadsIOError,
    KeyDecodeError,
    KeyEncodeError,
    NotADirectory,
)
from .store import PREFIX, FileHeads

__all__ = [
    "PREFIX",
    "DirectoryListingError",
    "FileHeads",
    "FileHeadsError",
    "HeadsIOError",
    "KeyCodec",
    "KeyDecodeError",
    "KeyEncodeError",
    "NotADirectory",
]
