import gc
import threading

from app.annotations.locks import ArticleLocks


def test_lock_released_entries_are_dropped():
    locks = ArticleLocks()
    with locks.hold("a1"):
        assert "a1" in locks
    gc.collect()
    assert "a1" not in locks


def test_waiters_share_one_lock():
    locks = ArticleLocks()
    order = []
    entered = threading.Event()
    release = threading.Event()

    def first():
        with locks.hold("a1"):
            entered.set()
            release.wait(5)
            order.append("first")

    def second():
        with locks.hold("a1"):
            order.append("second")

    t1 = threading.Thread(target=first)
    t1.start()
    entered.wait(5)
    t2 = threading.Thread(target=second)
    t2.start()
    t2.join(0.2)
    assert order == []
    release.set()
    t1.join()
    t2.join()
    assert order == ["first", "second"]


def test_different_articles_do_not_block():
    locks = ArticleLocks()
    with locks.hold("a1"):
        done = threading.Event()

        def other():
            with locks.hold("a2"):
                done.set()

        t = threading.Thread(target=other)
        t.start()
        assert done.wait(5)
        t.join()
