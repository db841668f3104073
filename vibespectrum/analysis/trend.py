"""Peak-in-band trend across stored spectra."""

from __future__ import annotations

import logging

from ..errors import NotFoundError, OutOfRangeError
from ..spectrum_store import SpectrumStore
from .band_peaks import calculate_peak_in_band

LOGGER = logging.getLogger(__name__)


def get_peak_in_band_trend(
    store: SpectrumStore,
    start_date: str,
    end_date: str,
    start_freq: float,
    end_freq: float,
) -> dict[str, float]:
    """Peak in ``[start_freq, end_freq]`` Hz for every stored timestamp in range.

    Timestamps between *start_date* and *end_date* (inclusive, compared as
    strings) are visited in chronological order.  Dates without a stored
    spectrum are simply absent.  A stored spectrum the band does not fit is
    skipped with a warning.
    """
    if start_date > end_date:
        return {}
    trend: dict[str, float] = {}
    for timestamp in store.timestamps(start_date, end_date):
        try:
            spectrum = store.retrieve(timestamp)
        except NotFoundError:
            LOGGER.warning("Spectrum %s disappeared or is unreadable; skipped in trend", timestamp)
            continue
        try:
            trend[timestamp] = calculate_peak_in_band(spectrum, start_freq, end_freq)
        except OutOfRangeError as exc:
            LOGGER.warning("Skipping %s in trend: %s", timestamp, exc)
    return trend
