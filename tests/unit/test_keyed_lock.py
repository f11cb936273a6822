import threading
import time

from sentinel.lifecycle.locks import KeyedLock


class TestKeyedLock:
    def test_same_key_is_serialized(self) -> None:
        locks = KeyedLock()
        active = 0
        overlaps = 0
        guard = threading.Lock()

        def worker() -> None:
            nonlocal active, overlaps
            with locks.hold("file-1"):
                with guard:
                    active += 1
                    if active > 1:
                        overlaps += 1
                time.sleep(0.01)
                with guard:
                    active -= 1

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert overlaps == 0

    def test_different_keys_do_not_block(self) -> None:
        locks = KeyedLock()
        entered = threading.Event()

        def other() -> None:
            with locks.hold("b"):
                entered.set()

        with locks.hold("a"):
            thread = threading.Thread(target=other)
            thread.start()
            assert entered.wait(timeout=1.0)
            thread.join()

    def test_entries_released(self) -> None:
        locks = KeyedLock()
        with locks.hold("a"):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_released_on_exception(self) -> None:
        locks = KeyedLock()
        try:
            with locks.hold("a"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        with locks.hold("a"):
            assert len(locks) == 1
