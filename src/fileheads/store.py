from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, Future
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Literal, Optional, TypeVar

from heads import Heads

from .codec import KeyCodec
from .errors import (
    DirectoryListingError,
    HeadsIOError,
    KeyDecodeError,
    KeyEncodeError,
    NotADirectory,
)
from .pool import failed, make_pool, workers_from_env


logger = logging.getLogger(__name__)

K = TypeVar("K")

PREFIX = "head:"

# Environment variable names for convenience configuration
ENV_DIR = "FILEHEADS_DIR"

OnDecodeError = Literal["raise", "skip"]


# -------- Worker units (one filesystem call each) --------
def _touch(path: Path) -> None:
    try:
        with open(path, "wb"):
            pass
    except OSError as e:
        raise HeadsIOError(f"failed to create head file {path}", e) from e


def _unlink(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        # Already gone
        return
    except OSError as e:
        raise HeadsIOError(f"failed to remove head file {path}", e) from e


def _exists(path: Path) -> bool:
    # False on any stat failure (ENAMETOOLONG, EACCES, ...)
    return os.path.exists(path)


def list_entries(base: Path) -> list[str]:
    """Return the raw entry names of `base`, in directory order."""
    try:
        return os.listdir(base)
    except OSError as e:
        raise DirectoryListingError(f"failed to list '{base}'", e) from e


def decode_entries(
    names: Iterable[str],
    codec: KeyCodec[K],
    *,
    on_decode_error: OnDecodeError = "raise",
) -> Iterator[K]:
    """
    Decode the prefixed entries of a directory listing.

    Names without `PREFIX` are skipped silently. A prefixed name that does not
    decode raises `KeyDecodeError`, which ends the iteration, unless
    `on_decode_error="skip"` in which case it is logged and skipped.
    """
    for name in names:
        if not name.startswith(PREFIX):
            continue
        try:
            key = codec.decode(name[len(PREFIX):])
        except KeyDecodeError as ex:
            if on_decode_error == "skip":
                logger.warning("skipping undecodable head file %r: %s", name, ex)
                continue
            raise
        yield key


class FileHeads(Heads[K]):
    """
    File-backed persistent head store.

    Each head is an empty file named `head:<encoded key>` in the base
    directory; the file's existence is the only state. Filesystem calls run on
    a thread pool so no operation blocks the caller.

    Notes
    - Every worker unit performs a single filesystem call and takes no locks.
      Concurrent `add`/`remove` on one key race at the OS level and the last
      call wins. `heads()` is an unisolated point-in-time listing.
    - Nothing is cached: a second store over the same directory sees exactly
      the same heads.
    - When no pool is passed, the store builds one sized to the CPU count and
      shuts it down in `close()`. A caller-supplied pool is left running.

    Environment variables (optional)
    - `FILEHEADS_DIR`:     base directory used by `from_env()`
    - `FILEHEADS_WORKERS`: pool size used by `from_env()`
    """

    def __init__(
        self,
        base: Path,
        *,
        codec: KeyCodec[K],
        pool: Executor,
        owns_pool: bool = False,
    ) -> None:
        self._base = Path(base)
        self._codec = codec
        self._pool = pool
        self._owns_pool = owns_pool

    # -------- Construction helpers --------
    @classmethod
    def open(
        cls,
        path: os.PathLike[str] | str,
        *,
        key_type: Any = str,
        pool: Optional[Executor] = None,
        workers: Optional[int] = None,
    ) -> "FileHeads[Any]":
        base = Path(path)
        if not base.is_dir():
            raise NotADirectory(base)
        owns_pool = pool is None
        return cls(
            base,
            codec=KeyCodec(key_type),
            pool=pool if pool is not None else make_pool(workers),
            owns_pool=owns_pool,
        )

    @classmethod
    def create(
        cls,
        path: os.PathLike[str] | str,
        *,
        key_type: Any = str,
        pool: Optional[Executor] = None,
        workers: Optional[int] = None,
    ) -> "FileHeads[Any]":
        base = Path(path)
        try:
            base.mkdir(parents=True, exist_ok=True)
        except FileExistsError as e:
            raise NotADirectory(base) from e
        except OSError as e:
            raise HeadsIOError(f"failed to create '{base}'", e) from e
        return cls.open(base, key_type=key_type, pool=pool, workers=workers)

    @classmethod
    def from_env(
        cls, *, key_type: Any = str, pool: Optional[Executor] = None
    ) -> "FileHeads[Any]":
        base = os.environ.get(ENV_DIR)
        if not base:
            raise RuntimeError(
                f"Missing required environment variables for file head store: {ENV_DIR}"
            )
        workers = workers_from_env() if pool is None else None
        return cls.create(base, key_type=key_type, pool=pool, workers=workers)

    @property
    def base(self) -> Path:
        return self._base

    @property
    def codec(self) -> KeyCodec[K]:
        return self._codec

    def close(self) -> None:
        if self._owns_pool:
            self._pool.shutdown(wait=True)

    def __enter__(self) -> "FileHeads[K]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"FileHeads({str(self._base)!r}, key_type={self._codec.type_name()})"

    def get_path(self, key: K) -> Path:
        """Marker file path for `key`. Raises `KeyEncodeError`."""
        return self._base / f"{PREFIX}{self._codec.encode(key)}"

    # -------- Core operations --------
    def add(self, key: K) -> "Future[None]":
        return self._dispatch(_touch, key)

    def remove(self, key: K) -> "Future[None]":
        return self._dispatch(_unlink, key)

    def is_head(self, key: K) -> "Future[bool]":
        return self._dispatch(_exists, key)

    def heads(self, *, on_decode_error: OnDecodeError = "raise") -> Iterator[K]:
        """Start listing the base directory and return a lazy iterator of keys.

        The listing is dispatched immediately; iteration blocks until it
        completes. A failed listing raises `DirectoryListingError` from the
        first `next()`. With the default `on_decode_error="raise"` the first
        undecodable `head:` file raises `KeyDecodeError` and ends the
        iteration; `"skip"` logs and skips such files instead.
        """
        if on_decode_error not in ("raise", "skip"):
            raise ValueError(f"on_decode_error must be 'raise' or 'skip', got {on_decode_error!r}")
        listing = self._pool.submit(list_entries, self._base)
        return self._iter_heads(listing, on_decode_error)

    def _iter_heads(self, listing: "Future[list[str]]", on_decode_error: OnDecodeError) -> Iterator[K]:
        names = listing.result()
        yield from decode_entries(names, self._codec, on_decode_error=on_decode_error)

    def _dispatch(self, unit: Callable[[Path], Any], key: K) -> Future:
        # Path is computed before dispatch; encoding errors fail the handle
        try:
            path = self.get_path(key)
        except KeyEncodeError as ex:
            return failed(ex)
        logger.debug("dispatching %s for %s", unit.__name__.lstrip("_"), path.name)
        return self._pool.submit(unit, path)
