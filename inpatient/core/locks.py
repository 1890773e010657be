"""
In-process keyed locks for allocation.

Each ward, bed and patient gets its own lock, created on demand and
discarded once nobody holds or waits for it. A caller asks for every key
it needs in a single `hold()` call; keys are acquired in sorted order so
two callers can never wait on each other in a cycle.
"""
from contextlib import contextmanager
from typing import Dict, Iterator, List, Tuple
import logging
import threading
import time

from inpatient.config import settings
from inpatient.core.exceptions import LockTimeoutError

logger = logging.getLogger("inpatient.locks")


def ward_key(ward_id: str) -> str:
    return f"ward:{ward_id}"


def bed_key(bed_id: str) -> str:
    return f"bed:{bed_id}"


def patient_key(patient_id: str) -> str:
    return f"patient:{patient_id}"


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class KeyedLockRegistry:
    """
    Registry of reentrancy-free locks indexed by string key.

    Usage:
        with registry.hold(bed_key(bed_id), patient_key(patient_id)):
            ...  # check-then-set on that bed and patient
    """

    def __init__(self, timeout: float = None):
        self._guard = threading.Lock()
        self._entries: Dict[str, _Entry] = {}
        self.timeout = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout

    def _checkout(self, key: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
            return entry

    def _checkin(self, key: str) -> None:
        with self._guard:
            entry = self._entries[key]
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    @contextmanager
    def hold(self, *keys: str) -> Iterator[List[str]]:
        """
        Acquires every given key, blocking up to `timeout` seconds in total.

        Args:
            *keys: Lock keys (duplicates and None are ignored)

        Yields:
            The sorted list of held keys

        Raises:
            LockTimeoutError: if some key could not be acquired in time
        """
        ordered = sorted({k for k in keys if k})
        deadline = time.monotonic() + self.timeout
        acquired: List[Tuple[str, _Entry]] = []

        try:
            for key in ordered:
                entry = self._checkout(key)
                remaining = max(0.0, deadline - time.monotonic())
                if not entry.lock.acquire(timeout=remaining):
                    self._checkin(key)
                    logger.warning(
                        f"Lock timeout on {key} (holding {[k for k, _ in acquired]})"
                    )
                    raise LockTimeoutError(ordered, self.timeout)
                acquired.append((key, entry))
            yield ordered
        finally:
            for key, entry in reversed(acquired):
                entry.lock.release()
                self._checkin(key)

    def is_held(self, key: str) -> bool:
        """True while some caller holds or waits for the key."""
        with self._guard:
            return key in self._entries

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


# Process-wide registry shared by every service instance
allocation_locks = KeyedLockRegistry()
