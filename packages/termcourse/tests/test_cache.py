"""Tests for termcourse.preview.cache"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from termcourse.preview.cache import REJECTED, PreviewCache, PreviewKey


def key(url: str = "https://h.example/a.png", width: int = 40) -> PreviewKey:
    return PreviewKey(url=url, width=width, max_lines=12, backend="chafa")


class TestPreviewCache:
    def test_miss_then_hit(self):
        cache = PreviewCache()
        assert cache.get(key()) is None
        cache.put(key(), ["a", "b"])
        assert cache.get(key()) == ("a", "b")
        assert cache.hits == 1
        assert cache.misses == 1

    def test_key_includes_width(self):
        cache = PreviewCache()
        cache.put(key(width=40), ["wide"])
        assert cache.get(key(width=20)) is None

    def test_first_write_wins(self):
        cache = PreviewCache()
        cache.put(key(), ["first"])
        assert cache.put(key(), ["second"]) == ("first",)
        assert cache.get(key()) == ("first",)

    def test_rejection_is_cached(self):
        cache = PreviewCache()
        calls = []
        cache.get_or_compute(key(), lambda: calls.append(1) or REJECTED)
        assert cache.get_or_compute(key(), lambda: calls.append(1) or ["late"]) == REJECTED
        assert calls == [1]
        assert key() in cache

    def test_values_are_immutable_tuples(self):
        cache = PreviewCache()
        value = cache.put(key(), ["x"])
        assert isinstance(value, tuple)

    def test_unbounded_by_default(self):
        cache = PreviewCache()
        for i in range(100):
            cache.put(key(url=f"u{i}"), ["x"])
        assert len(cache) == 100
        assert cache.capacity is None

    def test_lru_eviction(self):
        cache = PreviewCache(capacity=2)
        cache.put(key(url="a"), ["a"])
        cache.put(key(url="b"), ["b"])
        cache.get(key(url="a"))
        cache.put(key(url="c"), ["c"])
        assert key(url="a") in cache
        assert key(url="b") not in cache
        assert len(cache) == 2

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_invalid_capacity(self, capacity):
        with pytest.raises(ValueError):
            PreviewCache(capacity=capacity)

    def test_clear(self):
        cache = PreviewCache()
        cache.put(key(), ["x"])
        cache.clear()
        assert len(cache) == 0

    def test_compute_error_propagates_and_is_not_cached(self):
        cache = PreviewCache()

        def boom():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            cache.get_or_compute(key(), boom)
        assert key() not in cache
        assert cache.get_or_compute(key(), lambda: ["ok"]) == ("ok",)


class TestConcurrentCompute:
    def test_single_computation_per_key(self):
        cache = PreviewCache()
        calls = []
        lock = threading.Lock()

        def compute():
            with lock:
                calls.append(1)
            time.sleep(0.05)
            return ["rendered"]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: cache.get_or_compute(key(), compute), range(16)))

        assert len(calls) == 1
        assert all(r == ("rendered",) for r in results)

    def test_distinct_keys_compute_independently(self):
        cache = PreviewCache()
        calls = []
        lock = threading.Lock()

        def compute_for(url):
            def compute():
                with lock:
                    calls.append(url)
                return [url]
            return compute

        urls = [f"u{i % 4}" for i in range(20)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda u: cache.get_or_compute(key(url=u), compute_for(u)), urls))

        assert sorted(calls) == ["u0", "u1", "u2", "u3"]
