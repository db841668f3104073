"""Window functions applied to a sample block before the FFT.

Only the two window kinds the engine supports are available: Hanning
(``0.5 - 0.5*cos(2*pi*i/(N-1))``) and Rectangular (all ones).  Coefficient
arrays are cached per ``(length, window_type)``.
"""

from __future__ import annotations

import logging
from threading import RLock

import numpy as np

from ..constants import WINDOW_CACHE_MAXSIZE
from ..domain_models import WindowType
from ..errors import InvalidInputError

LOGGER = logging.getLogger(__name__)


def _build_window(length: int, window_type: WindowType) -> np.ndarray:
    if window_type is WindowType.HANNING:
        idx = np.arange(length, dtype=np.float64)
        return 0.5 - 0.5 * np.cos(2.0 * np.pi * idx / (length - 1))
    return np.ones(length, dtype=np.float64)


class WindowCache:
    """Bounded, thread-safe cache of window coefficient arrays.

    Cached arrays are read-only so callers can share them freely.
    """

    def __init__(self, maxsize: int = WINDOW_CACHE_MAXSIZE) -> None:
        self._maxsize = max(1, int(maxsize))
        self._cache: dict[tuple[int, WindowType], np.ndarray] = {}
        self._lock = RLock()

    def get(self, length: int, window_type: WindowType | str) -> np.ndarray:
        length = int(length)
        if length < 2:
            raise InvalidInputError(f"Window length must be at least 2, got {length}")
        kind = WindowType.parse(window_type)
        key = (length, kind)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            coeffs = _build_window(length, kind)
            coeffs.setflags(write=False)
            self._cache[key] = coeffs
            if len(self._cache) > self._maxsize:
                oldest = next(iter(self._cache))
                del self._cache[oldest]
                LOGGER.debug("Evicted window %s from cache", oldest)
            return coeffs

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


_DEFAULT_CACHE = WindowCache()


def window_coefficients(length: int, window_type: WindowType | str) -> np.ndarray:
    """Return the (shared, read-only) coefficients for a window."""
    return _DEFAULT_CACHE.get(length, window_type)


def apply_window(samples: np.ndarray, window_type: WindowType | str) -> np.ndarray:
    """Multiply *samples* by the window; the result has the same length."""
    block = np.asarray(samples, dtype=np.float64)
    if block.ndim != 1:
        raise InvalidInputError(f"Expected a 1-D sample block, got shape {block.shape}")
    return block * window_coefficients(block.size, window_type)


def amplitude_correction(window: np.ndarray) -> float:
    """Single-sided amplitude correction ``2 / sum(window)``.

    Restores the amplitude of a bin-centred sinusoid: ``2/N`` for a
    rectangular window and about ``4/N`` (twice that) for Hanning.
    """
    total = float(np.sum(window))
    if total <= 0:
        raise InvalidInputError("Window has no energy")
    return 2.0 / total
