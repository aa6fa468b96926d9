"""In-process locks for the two shared resources of a sync.

- Singleton rows (teams, players) are serialized per natural id so concurrent
  upserts cannot lose updates.
- Each epoch has at most one writer; retirement refuses epochs that are being written.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

from chpp_snapshot.core.errors import ConcurrencyError

logger = logging.getLogger(__name__)


class KeyedLocks:
    """Per-key locks. An entry lives only while some caller holds or waits on it."""

    def __init__(self) -> None:
        # key -> (lock, number of callers holding or waiting)
        self._locks: dict[Hashable, tuple[threading.Lock, int]] = {}
        self._meta_lock = threading.Lock()

    def __len__(self) -> int:
        with self._meta_lock:
            return len(self._locks)

    def _acquire_ref(self, key: Hashable) -> threading.Lock:
        with self._meta_lock:
            entry = self._locks.get(key)
            lock, refs = entry if entry is not None else (threading.Lock(), 0)
            self._locks[key] = (lock, refs + 1)
            return lock

    def _release_ref(self, key: Hashable) -> None:
        with self._meta_lock:
            lock, refs = self._locks[key]
            if refs <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, refs - 1)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self._acquire_ref(key)
        try:
            with lock:
                yield
        finally:
            self._release_ref(key)


class EpochWriterRegistry:
    def __init__(self) -> None:
        self._active: set[int] = set()
        self._meta_lock = threading.Lock()

    def is_active(self, download_id: int) -> bool:
        with self._meta_lock:
            return download_id in self._active

    @contextmanager
    def writing(self, download_id: int) -> Iterator[None]:
        with self._meta_lock:
            if download_id in self._active:
                raise ConcurrencyError(f"download {download_id} already has an active writer")
            self._active.add(download_id)
        logger.debug("Writer acquired download %s", download_id)
        try:
            yield
        finally:
            with self._meta_lock:
                self._active.discard(download_id)
            logger.debug("Writer released download %s", download_id)


singleton_locks = KeyedLocks()
epoch_writers = EpochWriterRegistry()
