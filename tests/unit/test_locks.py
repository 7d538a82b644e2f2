"""
Unit tests for KeyedLocks.

Per-email mutual exclusion used by the OTP and admission services.
"""

import threading
import time

from src.domain.locks import KeyedLocks


class TestKeyedLocks:
    """Tests for per-key mutual exclusion."""

    def test_lock_is_reentrant(self) -> None:
        """Same thread may hold the same key twice."""
        locks = KeyedLocks()

        with locks.hold("a"):
            with locks.hold("a"):
                assert len(locks) == 1

    def test_entries_removed_when_released(self) -> None:
        """No bookkeeping is left for unused keys."""
        locks = KeyedLocks()

        with locks.hold("a"), locks.hold("b"):
            assert len(locks) == 2

        assert len(locks) == 0

    def test_same_key_is_mutually_exclusive(self) -> None:
        """Critical sections on one key never overlap."""
        locks = KeyedLocks()
        inside = 0
        max_inside = 0
        guard = threading.Lock()

        def work() -> None:
            nonlocal inside, max_inside
            for _ in range(50):
                with locks.hold("a"):
                    with guard:
                        inside += 1
                        max_inside = max(max_inside, inside)
                    time.sleep(0.0001)
                    with guard:
                        inside -= 1

        threads = [threading.Thread(target=work) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert max_inside == 1
        assert len(locks) == 0

    def test_different_keys_do_not_block(self) -> None:
        """Holding one key does not block another."""
        locks = KeyedLocks()
        acquired = threading.Event()

        def other() -> None:
            with locks.hold("b"):
                acquired.set()

        with locks.hold("a"):
            thread = threading.Thread(target=other)
            thread.start()
            assert acquired.wait(timeout=2)
            thread.join()
