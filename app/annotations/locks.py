import threading
import weakref
from contextlib import contextmanager


class ArticleLocks:
    """One mutex per article id.

    Annotation numbering reads the current sequence and writes back to it, so
    creates and deletes on the same article must not interleave. Different
    articles never block each other. A lock lives as long as somebody holds or
    waits on it.
    """

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def _lock_for(self, article_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(article_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[article_id] = lock
            return lock

    @contextmanager
    def hold(self, article_id: str):
        lock = self._lock_for(article_id)
        with lock:
            yield

    def __contains__(self, article_id: str) -> bool:
        return article_id in self._locks


article_locks = ArticleLocks()
