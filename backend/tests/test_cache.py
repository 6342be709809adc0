"""Tests for per-indicator result caching."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from conftest import make_candles
from stockterm.schemas.indicators import IndicatorResult
from stockterm.services.indicators import SMA
from stockterm.services.indicators.cache import IndicatorCache, data_hash, make_fingerprint


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _result(n: int = 1) -> IndicatorResult:
    return IndicatorResult(values=[[1.0] * n], timestamps=[float(i) for i in range(n)])


class TestIndicatorCache:
    def test_put_get(self):
        cache = IndicatorCache(max_size=5, max_age=60, clock=FakeClock())
        result = _result()
        cache.put("a", result)

        assert cache.get("a") is result
        assert cache.get("b") is None
        assert len(cache) == 1
        assert cache.stats()["hits"] == 1
        assert cache.stats()["misses"] == 1

    def test_expired_entry_is_removed(self):
        clock = FakeClock()
        cache = IndicatorCache(max_size=5, max_age=60, clock=clock)
        cache.put("a", _result())

        clock.advance(60)
        assert cache.get("a") is not None

        clock.advance(1)
        assert cache.get("a") is None
        assert "a" not in cache

    def test_insertion_order_eviction(self):
        cache = IndicatorCache(max_size=2, max_age=60, clock=FakeClock())
        cache.put("a", _result())
        cache.put("b", _result())

        # A hit does not protect "a" from eviction
        assert cache.get("a") is not None
        cache.put("c", _result())

        assert "a" not in cache
        assert "b" in cache
        assert "c" in cache

    def test_replacing_key_moves_it_to_newest(self):
        cache = IndicatorCache(max_size=2, max_age=60, clock=FakeClock())
        cache.put("a", _result())
        cache.put("b", _result())
        cache.put("a", _result(2))
        cache.put("c", _result())

        assert "b" not in cache
        assert cache.get("a").length == 2

    def test_clear(self):
        cache = IndicatorCache(max_size=2, max_age=60)
        cache.put("a", _result())
        cache.clear()
        assert len(cache) == 0

    def test_defaults_from_settings(self):
        cache = IndicatorCache()
        assert cache.max_size == 50
        assert cache.max_age == 300


class TestFingerprint:
    def test_empty_series(self):
        assert data_hash([]) == "0"
        assert make_fingerprint("SMA", [], {"period": 5}) == 'SMA-0-{"period": 5}'

    def test_param_order_irrelevant(self, linear_candles):
        a = make_fingerprint("SMA", linear_candles, {"period": 5, "source": "close"})
        b = make_fingerprint("SMA", linear_candles, {"source": "close", "period": 5})
        assert a == b

    def test_last_close_changes_key(self, linear_candles):
        changed = list(linear_candles)
        changed[-1] = changed[-1].model_copy(update={"close": 999.0})

        a = make_fingerprint("SMA", linear_candles, {"period": 5})
        b = make_fingerprint("SMA", changed, {"period": 5})
        assert a != b


class TestCalculateCached:
    def test_hit_returns_same_result(self, linear_candles):
        sma = SMA(enable_cache=True, clock=FakeClock())
        first = sma.calculate_cached(linear_candles, {"period": 5})
        second = sma.calculate_cached(linear_candles, {"period": 5})

        assert second is first
        assert len(sma.cache) == 1

    def test_explicit_defaults_share_entry(self, linear_candles):
        sma = SMA(enable_cache=True, clock=FakeClock())
        first = sma.calculate_cached(linear_candles)
        second = sma.calculate_cached(linear_candles, {"period": 20, "source": "close"})
        assert second is first

    def test_recomputes_after_expiry(self, linear_candles):
        clock = FakeClock()
        sma = SMA(enable_cache=True, cache_max_age=300, clock=clock)
        first = sma.calculate_cached(linear_candles, {"period": 5})

        clock.advance(301)
        second = sma.calculate_cached(linear_candles, {"period": 5})

        assert second is not first
        np.testing.assert_array_equal(second.as_arrays()[0], first.as_arrays()[0])

    def test_eviction_through_indicator(self, linear_candles):
        sma = SMA(enable_cache=True, cache_max_size=2, clock=FakeClock())
        r2 = sma.calculate_cached(linear_candles, {"period": 2})
        r3 = sma.calculate_cached(linear_candles, {"period": 3})
        sma.calculate_cached(linear_candles, {"period": 4})

        assert sma.calculate_cached(linear_candles, {"period": 2}) is not r2
        # period 3 was evicted by re-inserting period 2
        assert sma.calculate_cached(linear_candles, {"period": 3}) is not r3

    def test_different_data_misses(self, linear_candles):
        sma = SMA(enable_cache=True)
        first = sma.calculate_cached(linear_candles, {"period": 5})
        other = sma.calculate_cached(make_candles([1.0, 2.0, 3.0, 4.0, 5.0]), {"period": 5})

        assert other is not first
        assert other.length == 5

    def test_cache_disabled(self, linear_candles):
        sma = SMA(enable_cache=False)
        assert sma.cache is None

        first = sma.calculate_cached(linear_candles, {"period": 5})
        second = sma.calculate_cached(linear_candles, {"period": 5})
        assert second is not first

    def test_clear_cache(self, linear_candles):
        sma = SMA(enable_cache=True)
        first = sma.calculate_cached(linear_candles, {"period": 5})
        sma.clear_cache()
        assert sma.calculate_cached(linear_candles, {"period": 5}) is not first

    def test_instances_do_not_share_cache(self, linear_candles):
        a = SMA(enable_cache=True)
        b = SMA(enable_cache=True)
        assert a.calculate_cached(linear_candles) is not b.calculate_cached(linear_candles)


@pytest.mark.parametrize("max_size", [1, 3])
def test_cache_never_exceeds_capacity(max_size, linear_candles):
    sma = SMA(enable_cache=True, cache_max_size=max_size)
    for period in range(1, 10):
        sma.calculate_cached(linear_candles, {"period": period})
    assert len(sma.cache) == max_size


def test_concurrent_access_keeps_capacity_and_counters():
    cache = IndicatorCache(max_size=10, max_age=60)

    def fill(worker: int) -> None:
        for j in range(50):
            key = f"{worker}-{j}"
            cache.put(key, _result())
            cache.get(key)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(fill, range(8)))

    assert len(cache) == 10
    assert cache.hits + cache.misses == 8 * 50
