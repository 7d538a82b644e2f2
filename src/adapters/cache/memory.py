"""
In-memory expiring store adapter - Implements ExpiringStore protocol.

Process-local map of records with per-key expiry. Every ``put`` stamps
the entry with a fresh version; the eviction callback scheduled for that
put only deletes the entry if the version still matches, so a callback
left over from a replaced record never evicts its successor.

Expiry callbacks for every store run on one shared sweeper thread that
drains a deadline heap, so the thread count stays constant no matter how
many records are live.

Contents do not survive a restart. Deployments running more than one
process need a shared store behind the same protocol instead.
"""

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Scheduler = Callable[[float, Callable[[], None]], None]


class SweeperScheduler:
    """
    Runs one-shot callbacks at their deadlines from a single daemon thread.

    The thread is started on first use and sleeps until the earliest
    deadline in the heap, or until a sooner one is scheduled.
    """

    def __init__(
        self, name: str = "expiring-store-sweeper", clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._name = name
        self._clock = clock
        self._condition = threading.Condition()
        self._heap: list[tuple[float, int, Callable[[], None]]] = []
        self._sequence = itertools.count()
        self._thread: threading.Thread | None = None

    def __call__(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        deadline = self._clock() + delay_seconds
        with self._condition:
            heapq.heappush(self._heap, (deadline, next(self._sequence), callback))
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
                self._thread.start()
            self._condition.notify()

    def __len__(self) -> int:
        with self._condition:
            return len(self._heap)

    def _run(self) -> None:
        while True:
            with self._condition:
                while not self._heap:
                    self._condition.wait()
                deadline = self._heap[0][0]
                remaining = deadline - self._clock()
                if remaining > 0:
                    self._condition.wait(remaining)
                    continue
                _, _, callback = heapq.heappop(self._heap)
            try:
                callback()
            except Exception:
                logger.exception("Expiry callback failed on %s", self._name)


# Shared by every store that is not given its own scheduler
default_scheduler = SweeperScheduler()


class InMemoryExpiringStore(Generic[T]):
    """
    Implements ExpiringStore protocol with a lock-guarded dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, name: str, scheduler: Scheduler | None = None) -> None:
        """
        Initialize an empty store.

        Args:
            name: Label used in log messages
            scheduler: Callable scheduling a one-shot callback after a delay;
                defaults to the shared sweeper thread
        """
        self._name = name
        self._scheduler = scheduler if scheduler is not None else default_scheduler
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[int, T]] = {}
        self._versions = itertools.count(1)

    def get(self, key: str) -> T | None:
        with self._lock:
            entry = self._entries.get(key)
        return entry[1] if entry is not None else None

    def put(self, key: str, record: T, ttl_seconds: float) -> None:
        with self._lock:
            version = next(self._versions)
            self._entries[key] = (version, record)
        self._scheduler(ttl_seconds, lambda: self._evict(key, version))

    def update(self, key: str, record: T) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            self._entries[key] = (entry[0], record)
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict(self, key: str, version: int) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry[0] != version:
                return
            del self._entries[key]
        logger.debug("Evicted expired %s entry for %s", self._name, key)
