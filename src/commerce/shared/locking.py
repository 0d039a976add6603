"""Keyed in-process locks.

A check-then-write on a product, cart, customer or order must not interleave
with another one on the same key. Locks are held around the whole command,
so they cover the unit-of-work commit as well. Multiple keys are always
acquired in sorted order.
"""

import threading
from contextlib import contextmanager


class KeyedLocks:
    def __init__(self, name):
        self.name = name
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, *keys):
        ordered = sorted({str(key) for key in keys if key is not None})
        acquired = []
        try:
            for key in ordered:
                lock = self._lock_for(key)
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


product_locks = KeyedLocks("product")
cart_locks = KeyedLocks("cart")
customer_locks = KeyedLocks("customer")
order_locks = KeyedLocks("order")
