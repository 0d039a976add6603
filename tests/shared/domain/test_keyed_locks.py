import threading

from commerce.shared.locking import KeyedLocks


class TestKeyedLocks:
    def test_same_key_is_exclusive(self):
        locks = KeyedLocks("test")
        entered = threading.Event()
        released = threading.Event()
        order = []

        def _holder():
            with locks.hold("prod-1"):
                entered.set()
                released.wait(timeout=5)
                order.append("holder")

        def _waiter():
            entered.wait(timeout=5)
            with locks.hold("prod-1"):
                order.append("waiter")

        holder = threading.Thread(target=_holder)
        waiter = threading.Thread(target=_waiter)
        holder.start()
        waiter.start()
        entered.wait(timeout=5)
        released.set()
        holder.join(timeout=5)
        waiter.join(timeout=5)

        assert order == ["holder", "waiter"]

    def test_different_keys_do_not_block(self):
        locks = KeyedLocks("test")
        with locks.hold("prod-1"):
            acquired = threading.Event()

            def _other():
                with locks.hold("prod-2"):
                    acquired.set()

            thread = threading.Thread(target=_other)
            thread.start()
            thread.join(timeout=5)
            assert acquired.is_set()

    def test_duplicate_and_none_keys_are_ignored(self):
        locks = KeyedLocks("test")
        with locks.hold("prod-1", "prod-1", None):
            pass
        with locks.hold("prod-1"):
            pass

    def test_released_after_error(self):
        locks = KeyedLocks("test")
        try:
            with locks.hold("prod-1"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        assert locks._lock_for("prod-1").acquire(blocking=False)
