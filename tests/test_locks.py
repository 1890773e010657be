"""
Tests for the keyed lock registry.
"""
import threading
import time

import pytest

from inpatient.core.exceptions import LockTimeoutError
from inpatient.core.locks import KeyedLockRegistry, ward_key, bed_key, patient_key


class TestKeyedLockRegistry:
    """Tests for KeyedLockRegistry."""

    def test_hold_returns_sorted_unique_keys(self):
        registry = KeyedLockRegistry(timeout=1.0)

        with registry.hold("bed:2", "bed:1", None, "bed:2") as held:
            assert held == ["bed:1", "bed:2"]
            assert registry.is_held("bed:1")
            assert registry.is_held("bed:2")

    def test_entries_removed_after_release(self):
        """Locks are discarded once nobody uses them."""
        registry = KeyedLockRegistry(timeout=1.0)

        with registry.hold(ward_key("w"), bed_key("b"), patient_key("p")):
            assert len(registry) == 3

        assert len(registry) == 0
        assert not registry.is_held("bed:b")

    def test_released_on_exception(self):
        registry = KeyedLockRegistry(timeout=1.0)

        with pytest.raises(RuntimeError):
            with registry.hold("bed:1"):
                raise RuntimeError("boom")

        assert len(registry) == 0
        with registry.hold("bed:1"):
            pass

    def test_timeout_when_key_is_held(self):
        """A second holder of the same key times out without side effects."""
        registry = KeyedLockRegistry(timeout=0.2)
        acquired = threading.Event()
        release = threading.Event()

        def holder():
            with registry.hold("bed:1"):
                acquired.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        acquired.wait(5)

        try:
            with pytest.raises(LockTimeoutError) as exc_info:
                with registry.hold("bed:0", "bed:1"):
                    pass
            assert exc_info.value.details["retryable"] is True
            # bed:0 was released again after the timeout on bed:1
            assert not registry.is_held("bed:0")
        finally:
            release.set()
            thread.join()

        assert len(registry) == 0

    def test_unrelated_keys_do_not_block(self):
        registry = KeyedLockRegistry(timeout=0.5)
        acquired = threading.Event()
        release = threading.Event()

        def holder():
            with registry.hold("bed:1"):
                acquired.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        acquired.wait(5)

        try:
            start = time.monotonic()
            with registry.hold("bed:2"):
                pass
            assert time.monotonic() - start < 0.5
        finally:
            release.set()
            thread.join()

    def test_opposite_order_requests_do_not_deadlock(self):
        """Keys are taken in sorted order whatever order the caller uses."""
        registry = KeyedLockRegistry(timeout=5.0)
        errors = []

        def worker(keys):
            try:
                for _ in range(200):
                    with registry.hold(*keys):
                        pass
            except Exception as e:
                errors.append(e)

        threads = [
            threading.Thread(target=worker, args=(("bed:a", "bed:b"),)),
            threading.Thread(target=worker, args=(("bed:b", "bed:a"),)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(registry) == 0
