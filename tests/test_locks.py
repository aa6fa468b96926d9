from __future__ import annotations

import threading

from chpp_snapshot.sync.locks import KeyedLocks


def test_keyed_locks_forget_released_keys() -> None:
    locks = KeyedLocks()

    for team_id in range(100):
        with locks.hold(("team", team_id)):
            assert len(locks) == 1

    assert len(locks) == 0


def test_same_key_is_held_by_one_caller_at_a_time() -> None:
    locks = KeyedLocks()
    held = threading.Event()
    release = threading.Event()
    seen: list[str] = []

    def first() -> None:
        with locks.hold("team:1"):
            held.set()
            release.wait(timeout=5)
            seen.append("first")

    def second() -> None:
        with locks.hold("team:1"):
            seen.append("second")

    t1 = threading.Thread(target=first)
    t1.start()
    held.wait(timeout=5)
    t2 = threading.Thread(target=second)
    t2.start()
    release.set()
    t1.join()
    t2.join()

    assert seen == ["first", "second"]
    assert len(locks) == 0
