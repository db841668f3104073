"""Lightweight thread-pool wrapper for batch spectrum computation.

numpy releases the GIL inside the FFT, so a small thread pool lets several
waveforms be transformed at once without extra processes.

Usage::

    pool = WorkerPool(max_workers=4)
    spectra = pool.map_ordered(estimate, waveforms)
    pool.shutdown()
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_MAX_WORKERS = 4


class WorkerPool:
    """Fixed-size thread pool with lightweight metrics.

    Parameters
    ----------
    max_workers:
        Number of worker threads.
    thread_name_prefix:
        Prefix for worker-thread names (aids debugging / profiling).
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        thread_name_prefix: str = "vibespectrum-worker",
    ) -> None:
        self._max_workers = max(1, int(max_workers))
        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix=thread_name_prefix,
        )
        self._total_tasks: int = 0
        self._total_wait_s: float = 0.0
        self._failed_tasks: int = 0
        self._metrics_lock = threading.Lock()
        self._alive = True

    # -- Public API -----------------------------------------------------------

    def submit(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> Future[R]:
        """Submit a single callable; returns a ``Future``."""
        if not self._alive:
            raise RuntimeError("WorkerPool is shut down")
        with self._metrics_lock:
            self._total_tasks += 1
        return self._executor.submit(fn, *args, **kwargs)

    def map_ordered(self, fn: Callable[[T], R], items: Sequence[T]) -> list[R]:
        """Run *fn* on each item in parallel; return results in input order.

        All tasks are awaited before returning.  If any task raised, the
        first failure (in input order) is re-raised and no results are
        returned.
        """
        if not items:
            return []
        t0 = time.monotonic()
        futures = [self.submit(fn, item) for item in items]
        failures = 0
        results: list[R] = []
        first_error: BaseException | None = None
        for idx, fut in enumerate(futures):
            try:
                results.append(fut.result())
            except Exception as exc:
                failures += 1
                if first_error is None:
                    first_error = exc
                    LOGGER.debug("WorkerPool task %d failed", idx, exc_info=True)
        elapsed = time.monotonic() - t0
        with self._metrics_lock:
            self._total_wait_s += elapsed
            self._failed_tasks += failures
        if first_error is not None:
            raise first_error
        return results

    def shutdown(self, wait: bool = True) -> None:
        """Shut down the pool.  Safe to call multiple times."""
        self._alive = False
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> WorkerPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    # -- Observability --------------------------------------------------------

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def stats(self) -> dict[str, Any]:
        return {
            "max_workers": self._max_workers,
            "total_tasks": self._total_tasks,
            "failed_tasks": self._failed_tasks,
            "total_wait_s": round(self._total_wait_s, 4),
            "alive": self._alive,
        }
