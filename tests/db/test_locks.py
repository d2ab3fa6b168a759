"""Unit tests for src/db/locks.py"""

import threading
import time

from src.db.locks import KeyedLocks


def test_locks_are_dropped_after_use() -> None:
    locks = KeyedLocks()
    with locks.hold("a"):
        assert len(locks) == 1
    assert len(locks) == 0


def test_lock_is_released_on_error() -> None:
    locks = KeyedLocks()
    try:
        with locks.hold("a"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert len(locks) == 0
    # Would deadlock if the lock had not been released
    with locks.hold("a"):
        pass


def test_same_key_is_serialized() -> None:
    """Read-modify-write sequences under the same key never interleave."""
    locks = KeyedLocks()
    counter = {"value": 0}

    def increment() -> None:
        for _ in range(50):
            with locks.hold("match"):
                current = counter["value"]
                time.sleep(0)
                counter["value"] = current + 1

    threads = [threading.Thread(target=increment) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert counter["value"] == 400
    assert len(locks) == 0


def test_different_keys_do_not_block_each_other() -> None:
    locks = KeyedLocks()
    entered = threading.Event()

    def hold_other_key() -> None:
        with locks.hold("b"):
            entered.set()

    with locks.hold("a"):
        thread = threading.Thread(target=hold_other_key)
        thread.start()
        assert entered.wait(timeout=2)
        thread.join()
