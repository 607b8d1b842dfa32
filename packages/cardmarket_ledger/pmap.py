"""Order-preserving bounded parallel map over a thread pool.

Used to process orders (and to load their JSON files) concurrently while the
ledger keeps input order: results are re-sequenced by input position before
they are returned, so appending them to a document gives the same output as a
sequential loop.

- ``concurrency=1`` runs the mapper inline, without a pool.
- The first mapper error propagates; tasks that have not started are
  cancelled.
- A mapper may return ``p_map_skip`` to drop its item from the output.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


class _Skip:
    __slots__ = ()

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return "p_map_skip"


p_map_skip: object = _Skip()


def p_map(
    iterable: Iterable[InT],
    mapper: Callable[[InT], OutT | object],
    *,
    concurrency: int = 1,
    thread_name_prefix: str = "cml-worker",
) -> list[OutT]:
    """Map ``iterable`` through ``mapper`` with at most ``concurrency`` calls in flight."""

    if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    if concurrency == 1:
        return [v for v in (mapper(item) for item in iterable) if v is not p_map_skip]  # type: ignore[misc]

    pending = enumerate(iterable)
    results: dict[int, OutT | object] = {}
    in_flight: dict[Future, int] = {}

    def _top_up(pool: ThreadPoolExecutor) -> None:
        while len(in_flight) < concurrency:
            try:
                idx, item = next(pending)
            except StopIteration:
                return
            in_flight[pool.submit(mapper, item)] = idx

    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix=thread_name_prefix) as pool:
        _top_up(pool)
        while in_flight:
            done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
            for fut in done:
                idx = in_flight.pop(fut)
                try:
                    results[idx] = fut.result()
                except Exception:
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise
            _top_up(pool)

    return [results[i] for i in sorted(results) if results[i] is not p_map_skip]  # type: ignore[misc]


__all__ = ["p_map", "p_map_skip"]
