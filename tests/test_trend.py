from __future__ import annotations

import logging

import numpy as np
import pytest
from builders import make_spectrum

from vibespectrum.analysis.band_peaks import calculate_peak_in_band
from vibespectrum.analysis.trend import get_peak_in_band_trend
from vibespectrum.spectrum_store import InMemorySpectrumStore


def _store_with(**peaks: float) -> InMemorySpectrumStore:
    store = InMemorySpectrumStore()
    for stamp, value in peaks.items():
        mags = np.zeros(21)
        mags[10] = value
        store.store(stamp.replace("_", "-"), make_spectrum(mags))
    return store


class TestPeakInBandTrend:
    def test_chronological_order(self) -> None:
        store = _store_with(d2026_03_01=3.0, d2026_01_01=1.0, d2026_02_01=2.0)
        trend = get_peak_in_band_trend(store, "d2026-01-01", "d2026-12-31", 5.0, 15.0)
        assert list(trend.items()) == [
            ("d2026-01-01", 1.0),
            ("d2026-02-01", 2.0),
            ("d2026-03-01", 3.0),
        ]

    def test_range_is_inclusive_and_filters(self) -> None:
        store = _store_with(d2026_01_01=1.0, d2026_02_01=2.0, d2026_03_01=3.0)
        trend = get_peak_in_band_trend(store, "d2026-02-01", "d2026-03-01", 5.0, 15.0)
        assert trend == {"d2026-02-01": 2.0, "d2026-03-01": 3.0}

    def test_missing_dates_are_absent(self) -> None:
        trend = get_peak_in_band_trend(
            InMemorySpectrumStore(), "2026-01-01", "2026-12-31", 0.0, 5.0
        )
        assert trend == {}

    def test_reversed_dates_yield_empty_trend(self) -> None:
        store = _store_with(d2026_01_01=1.0)
        assert get_peak_in_band_trend(store, "d2026-12-31", "d2026-01-01", 5.0, 15.0) == {}

    def test_matches_individual_peaks(self) -> None:
        rng = np.random.default_rng(3)
        store = InMemorySpectrumStore()
        for day in range(1, 6):
            store.store(f"2026-04-0{day}", make_spectrum(rng.random(51), resolution_hz=0.5))
        trend = get_peak_in_band_trend(store, "2026-04-01", "2026-04-05", 3.0, 9.5)
        for stamp, value in trend.items():
            assert value == calculate_peak_in_band(store.retrieve(stamp), 3.0, 9.5)
        assert len(trend) == 5

    def test_spectrum_the_band_does_not_fit_is_skipped(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        store = _store_with(d2026_01_01=1.0)
        store.store("d2026-01-02", make_spectrum(np.ones(101)))
        with caplog.at_level(logging.WARNING, logger="vibespectrum.analysis.trend"):
            trend = get_peak_in_band_trend(store, "d2026-01-01", "d2026-01-31", 50.0, 60.0)
        assert trend == {"d2026-01-02": 1.0}
        assert "Skipping d2026-01-01" in caplog.text
