from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional


logger = logging.getLogger(__name__)

ENV_WORKERS = "FILEHEADS_WORKERS"

THREAD_NAME_PREFIX = "fileheads"


def default_workers() -> int:
    return os.cpu_count() or 1


def make_pool(workers: Optional[int] = None) -> ThreadPoolExecutor:
    """Build a worker pool for blocking filesystem calls.

    Sized to `workers`, or to the number of CPUs when not given. The caller owns
    the returned executor and is responsible for shutting it down.
    """
    if workers is None:
        workers = default_workers()
    if workers <= 0:
        raise ValueError("workers must be > 0")
    logger.debug("starting fileheads pool with %d workers", workers)
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix=THREAD_NAME_PREFIX)


def workers_from_env() -> Optional[int]:
    raw = os.environ.get(ENV_WORKERS)
    if raw in (None, ""):
        return None
    try:
        workers = int(raw)
    except ValueError as ex:
        raise ValueError(f"{ENV_WORKERS} must be an integer, got {raw!r}") from ex
    if workers <= 0:
        raise ValueError(f"{ENV_WORKERS} must be > 0, got {workers}")
    return workers


def failed(exc: BaseException) -> Future:
    """Return an already-completed future carrying `exc`."""
    fut: Future = Future()
    fut.set_exception(exc)
    return fut
