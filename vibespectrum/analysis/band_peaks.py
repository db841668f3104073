"""Band peak extraction: maximum magnitude inside a closed frequency band."""

from __future__ import annotations

import logging
import math

import numpy as np

from ..domain_models import BandKey, SpectrumResult
from ..errors import OutOfRangeError

LOGGER = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def band_key(spectrum: SpectrumResult, start_freq: float, end_freq: float) -> BandKey:
    """Line-index pair for a frequency band, validated and clamped.

    ``index = round(freq / resolution)`` clamped to ``[0, line_count - 1]``.
    Raises :class:`OutOfRangeError` when the bounds are reversed, not finite,
    or when the band does not touch ``[0, max_frequency_hz]`` at all.
    """
    try:
        start = float(start_freq)
        end = float(end_freq)
    except (TypeError, ValueError):
        raise OutOfRangeError(
            f"Band bounds must be numbers: {start_freq!r}, {end_freq!r}"
        ) from None
    if not (math.isfinite(start) and math.isfinite(end)):
        raise OutOfRangeError(f"Band bounds must be finite: {start!r}, {end!r}")
    if start > end:
        raise OutOfRangeError(f"Band start {start:g} Hz is above band end {end:g} Hz")
    max_hz = spectrum.max_frequency_hz
    if end < 0.0 or start > max_hz:
        raise OutOfRangeError(
            f"Band [{start:g}, {end:g}] Hz lies outside the spectrum range [0, {max_hz:g}] Hz"
        )
    last = spectrum.line_count - 1
    res = spectrum.resolution_hz
    start_idx = min(last, max(0, _round_half_up(start / res)))
    end_idx = min(last, max(0, _round_half_up(end / res)))
    return start_idx, end_idx


def peak_for_key(spectrum: SpectrumResult, key: BandKey) -> float:
    """Maximum magnitude over the key's lines that fall in the analysis range.

    Lines outside ``[min_frequency_hz, analysis_max_hz]`` stay in the
    spectrum but never count as a peak; a band wholly outside the analysis
    range therefore has a peak of ``0.0``.
    """
    lo, hi = spectrum.analysis_index_range()
    first = max(key[0], lo)
    last = min(key[1], hi)
    if first > last:
        LOGGER.debug("Band %s lies outside analysis lines [%d, %d]", key, lo, hi)
        return 0.0
    return float(np.max(spectrum.magnitudes[first : last + 1]))


def calculate_peak_in_band(
    spectrum: SpectrumResult,
    start_freq: float,
    end_freq: float,
) -> float:
    """Peak magnitude of *spectrum* in ``[start_freq, end_freq]`` Hz.

    The result is also recorded in ``spectrum.band_peaks`` under the band's
    line-index key, overwriting any previous value for the same key.
    """
    key = band_key(spectrum, start_freq, end_freq)
    peak = peak_for_key(spectrum, key)
    spectrum.band_peaks[key] = peak
    return peak


def band_frequency_bounds(spectrum: SpectrumResult, key: BandKey) -> tuple[float, float]:
    """Frequencies (Hz) of the first and last line of a band key."""
    return key[0] * spectrum.resolution_hz, key[1] * spectrum.resolution_hz


def calculate_band_peaks(
    spectrum: SpectrumResult,
    band_width_hz: float,
) -> dict[tuple[float, float], float]:
    """Peaks for consecutive bands of *band_width_hz* across the analysis range.

    Bands start at the analysis minimum; the last band is cut at the
    analysis maximum.  Each band is recorded in ``spectrum.band_peaks`` as
    a side effect.  Returns ``{(start_hz, end_hz): peak}`` in ascending order.
    """
    width = float(band_width_hz)
    if not math.isfinite(width) or width <= 0:
        raise OutOfRangeError(f"Band width must be positive, got {band_width_hz!r}")
    low = spectrum.min_frequency_hz
    high = float(spectrum.analysis_max_hz)
    if high <= low:
        return {}
    count = int(math.ceil((high - low) / width - 1e-9))
    out: dict[tuple[float, float], float] = {}
    for i in range(count):
        start = low + i * width
        end = min(start + width, high)
        out[(start, end)] = calculate_peak_in_band(spectrum, start, end)
    return out
