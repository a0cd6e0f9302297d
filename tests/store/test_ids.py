"""Tests for IdGenerator."""

import re
import threading

from lyrics_manager.store.ids import IdGenerator


def _stamp(identity: str, prefix: str) -> int:
    return int(identity[len(prefix):].split("_")[0])


class TestIdGenerator:
    """Tests for IdGenerator."""

    def test_format(self):
        generator = IdGenerator("song_", clock=lambda: 1234)

        identity = generator.generate()

        assert re.fullmatch(r"song_1234_[0-9a-f]{8}", identity)

    def test_no_prefix(self):
        identity = IdGenerator(clock=lambda: 42).generate()

        assert re.fullmatch(r"42_[0-9a-f]{8}", identity)

    def test_stalled_clock_still_increases(self):
        """Timestamps advance even when the clock does not."""
        generator = IdGenerator("s_", clock=lambda: 1000)

        stamps = [_stamp(generator.generate(), "s_") for _ in range(5)]

        assert stamps == [1000, 1001, 1002, 1003, 1004]

    def test_backwards_clock_still_increases(self):
        readings = iter([500, 400, 300])
        generator = IdGenerator("s_", clock=lambda: next(readings))

        stamps = [_stamp(generator.generate(), "s_") for _ in range(3)]

        assert stamps == [500, 501, 502]

    def test_unique_across_threads(self):
        generator = IdGenerator("s_")
        results: list[str] = []
        lock = threading.Lock()

        def worker():
            local = [generator.generate() for _ in range(200)]
            with lock:
                results.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(results)) == 800
        assert len({_stamp(r, "s_") for r in results}) == 800

    def test_separate_generators_differ_by_suffix(self):
        first = IdGenerator("s_", clock=lambda: 7).generate()
        second = IdGenerator("s_", clock=lambda: 7).generate()

        # Same tick, different random suffix (collision odds 1 in 2**32)
        assert first != second
