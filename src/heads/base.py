from __future__ import annotations

from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Generic, Iterator, List, TypeVar


K = TypeVar("K")


class Heads(ABC, Generic[K]):
    """
    Asynchronous set of head keys.

    Every operation returns without blocking on IO. `add`, `remove` and
    `is_head` hand back a `concurrent.futures.Future`; call `.result()` (with
    an optional timeout) or attach callbacks to observe completion. `heads()`
    returns a lazy, single-pass iterator whose errors are raised from `next()`
    and end the iteration.

    Keys must be immutable values that can be shared across worker threads.
    """

    @abstractmethod
    def add(self, key: K) -> "Future[None]":
        """Mark `key` as a head. Adding an existing head succeeds."""

    @abstractmethod
    def remove(self, key: K) -> "Future[None]":
        """Unmark `key`. Removing a key that is not a head succeeds."""

    @abstractmethod
    def is_head(self, key: K) -> "Future[bool]":
        """Resolve to whether `key` is currently a head."""

    @abstractmethod
    def heads(self) -> Iterator[K]:
        """Iterate over the current heads in unspecified order."""

    def collect(self) -> List[K]:
        """Drain `heads()` into a list, blocking until the listing completes."""
        return list(self.heads())
