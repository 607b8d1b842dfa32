import threading
import time

import pytest

from cardmarket_ledger.pmap import p_map, p_map_skip


@pytest.mark.parametrize("concurrency", [1, 3, 8])
def test_results_keep_input_order(concurrency):
    def slow_for_small(n: int) -> int:
        # Earlier items finish last when running in parallel.
        time.sleep(0.002 * (10 - n))
        return n * n

    assert p_map(range(10), slow_for_small, concurrency=concurrency) == [n * n for n in range(10)]


def test_skip_sentinel_drops_items():
    out = p_map(range(6), lambda n: p_map_skip if n % 2 else n, concurrency=2)
    assert out == [0, 2, 4]


def test_bounded_in_flight():
    lock = threading.Lock()
    active = 0
    peak = 0

    def track(_):
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.005)
        with lock:
            active -= 1

    p_map(range(12), track, concurrency=3)
    assert 1 <= peak <= 3


def test_first_error_propagates():
    def boom(n: int) -> int:
        if n == 4:
            raise RuntimeError("boom")
        return n

    with pytest.raises(RuntimeError, match="boom"):
        p_map(range(10), boom, concurrency=2)


@pytest.mark.parametrize("concurrency", [0, -1, True])
def test_invalid_concurrency(concurrency):
    with pytest.raises(ValueError):
        p_map([1], lambda x: x, concurrency=concurrency)
