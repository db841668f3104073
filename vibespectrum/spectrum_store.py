"""Persistence interface for spectrum results, plus an in-memory store.

The core only needs ``store`` / ``retrieve`` keyed by an opaque timestamp
string, and a sorted listing of timestamps for trend aggregation.
Timestamps must sort lexicographically in chronological order (ISO-8601
dates or datetimes do).
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Protocol, runtime_checkable

from .domain_models import SpectrumResult
from .errors import NotFoundError

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class SpectrumStore(Protocol):
    def store(self, timestamp: str, result: SpectrumResult) -> None: ...

    def retrieve(self, timestamp: str) -> SpectrumResult: ...

    def timestamps(self, start: str | None = None, end: str | None = None) -> list[str]: ...

    def delete(self, timestamp: str) -> bool: ...


def _in_range(timestamp: str, start: str | None, end: str | None) -> bool:
    if start is not None and timestamp < start:
        return False
    if end is not None and timestamp > end:
        return False
    return True


def _copy(result: SpectrumResult) -> SpectrumResult:
    # magnitudes are read-only and can be shared; the peak cache cannot.
    return SpectrumResult(
        magnitudes=result.magnitudes,
        resolution_hz=result.resolution_hz,
        quantity=result.quantity,
        window_type=result.window_type,
        min_frequency_hz=result.min_frequency_hz,
        analysis_max_hz=result.analysis_max_hz,
        high_pass_hz=result.high_pass_hz,
        averages=result.averages,
        band_peaks=dict(result.band_peaks),
    )


class InMemorySpectrumStore:
    """Dict-backed store; results are copied on the way in and out."""

    def __init__(self) -> None:
        self._results: dict[str, SpectrumResult] = {}
        self._lock = RLock()

    def store(self, timestamp: str, result: SpectrumResult) -> None:
        key = str(timestamp)
        with self._lock:
            if key in self._results:
                LOGGER.debug("Overwriting stored spectrum %s", key)
            self._results[key] = _copy(result)

    def retrieve(self, timestamp: str) -> SpectrumResult:
        with self._lock:
            result = self._results.get(str(timestamp))
        if result is None:
            raise NotFoundError(f"No spectrum stored for timestamp {timestamp!r}")
        return _copy(result)

    def timestamps(self, start: str | None = None, end: str | None = None) -> list[str]:
        with self._lock:
            keys = list(self._results)
        return sorted(key for key in keys if _in_range(key, start, end))

    def delete(self, timestamp: str) -> bool:
        with self._lock:
            return self._results.pop(str(timestamp), None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)
