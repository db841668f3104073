from __future__ import annotations

import threading

import pytest

from vibespectrum.worker_pool import WorkerPool


class TestWorkerPool:
    def test_map_ordered_keeps_input_order(self, worker_pool: WorkerPool) -> None:
        assert worker_pool.map_ordered(lambda x: x * x, [3, 1, 2]) == [9, 1, 4]

    def test_empty_input(self, worker_pool: WorkerPool) -> None:
        assert worker_pool.map_ordered(lambda x: x, []) == []

    def test_first_failure_in_input_order_is_raised(self, worker_pool: WorkerPool) -> None:
        def work(x: int) -> int:
            if x == 2:
                raise ValueError("two")
            if x == 3:
                raise KeyError("three")
            return x

        with pytest.raises(ValueError, match="two"):
            worker_pool.map_ordered(work, [1, 2, 3])
        assert worker_pool.stats()["failed_tasks"] == 2

    def test_runs_on_worker_threads(self) -> None:
        with WorkerPool(max_workers=2, thread_name_prefix="batch") as pool:
            names = pool.map_ordered(lambda _: threading.current_thread().name, [0, 1])
        assert all(name.startswith("batch") for name in names)

    def test_max_workers_at_least_one(self) -> None:
        with WorkerPool(max_workers=0) as pool:
            assert pool.max_workers == 1

    def test_stats_count_tasks(self, worker_pool: WorkerPool) -> None:
        worker_pool.map_ordered(lambda x: x, [1, 2, 3])
        stats = worker_pool.stats()
        assert stats["total_tasks"] == 3
        assert stats["max_workers"] == 2
        assert stats["alive"] is True

    def test_submit_after_shutdown(self) -> None:
        pool = WorkerPool(max_workers=1)
        pool.shutdown()
        pool.shutdown()
        with pytest.raises(RuntimeError, match="shut down"):
            pool.submit(lambda: None)
