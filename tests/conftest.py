"""Shared fixtures for the vibespectrum test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from builders import analyzer_settings

from vibespectrum.analyzer import SpectrumAnalyzer
from vibespectrum.processing.estimator import SpectrumEstimator
from vibespectrum.spectrum_store import InMemorySpectrumStore
from vibespectrum.worker_pool import WorkerPool


@pytest.fixture
def estimator() -> SpectrumEstimator:
    return SpectrumEstimator(analyzer_settings())


@pytest.fixture
def memory_store() -> InMemorySpectrumStore:
    return InMemorySpectrumStore()


@pytest.fixture
def analyzer(memory_store: InMemorySpectrumStore) -> SpectrumAnalyzer:
    return SpectrumAnalyzer(store=memory_store, settings=analyzer_settings())


@pytest.fixture
def worker_pool() -> Iterator[WorkerPool]:
    pool = WorkerPool(max_workers=2, thread_name_prefix="test")
    try:
        yield pool
    finally:
        pool.shutdown()
