from __future__ import annotations

import numpy as np
import pytest
from builders import make_spectrum

from vibespectrum.analysis.band_peaks import (
    band_frequency_bounds,
    band_key,
    calculate_band_peaks,
    calculate_peak_in_band,
)
from vibespectrum.errors import OutOfRangeError

_LINES = [0.0, 1.0, 5.0, 2.0, 9.0, 3.0, 0.5, 4.0, 0.0, 6.0]


class TestBandKey:
    def test_rounds_to_nearest_line(self) -> None:
        spectrum = make_spectrum(np.zeros(21), resolution_hz=0.5)
        assert band_key(spectrum, 0.74, 1.26) == (1, 3)

    def test_half_line_rounds_up(self) -> None:
        spectrum = make_spectrum(np.zeros(10))
        assert band_key(spectrum, 0.5, 2.5) == (1, 3)

    def test_clamped_to_spectrum(self) -> None:
        spectrum = make_spectrum(np.zeros(10))
        assert band_key(spectrum, -3.0, 50.0) == (0, 9)

    def test_reversed_bounds(self) -> None:
        with pytest.raises(OutOfRangeError, match="above band end"):
            band_key(make_spectrum(np.zeros(10)), 5.0, 4.0)

    @pytest.mark.parametrize(("start", "end"), [(10.0, 20.0), (-5.0, -1.0)])
    def test_band_outside_spectrum(self, start: float, end: float) -> None:
        with pytest.raises(OutOfRangeError, match="outside the spectrum"):
            band_key(make_spectrum(np.zeros(10)), start, end)

    def test_non_finite_bounds(self) -> None:
        with pytest.raises(OutOfRangeError, match="finite"):
            band_key(make_spectrum(np.zeros(10)), float("nan"), 3.0)

    def test_frequency_bounds_of_key(self) -> None:
        spectrum = make_spectrum(np.zeros(21), resolution_hz=0.5)
        assert band_frequency_bounds(spectrum, (2, 7)) == (1.0, 3.5)


class TestCalculatePeakInBand:
    def test_peak_value(self) -> None:
        spectrum = make_spectrum(_LINES)
        assert calculate_peak_in_band(spectrum, 1.0, 3.0) == 5.0
        assert calculate_peak_in_band(spectrum, 0.0, 9.0) == 9.0

    def test_single_line_band(self) -> None:
        assert calculate_peak_in_band(make_spectrum(_LINES), 7.0, 7.0) == 4.0

    def test_result_recorded_under_line_key(self) -> None:
        spectrum = make_spectrum(_LINES)
        calculate_peak_in_band(spectrum, 4.6, 7.2)
        assert spectrum.band_peaks == {(5, 7): 4.0}

    def test_repeated_call_is_idempotent(self) -> None:
        spectrum = make_spectrum(_LINES)
        first = calculate_peak_in_band(spectrum, 1.0, 3.0)
        second = calculate_peak_in_band(spectrum, 1.1, 2.9)
        assert first == second
        assert spectrum.band_peaks == {(1, 3): 5.0}

    def test_partition_property(self) -> None:
        rng = np.random.default_rng(7)
        spectrum = make_spectrum(rng.random(101), resolution_hz=0.25)
        whole = calculate_peak_in_band(spectrum, 2.0, 20.0)
        for split in (2.0, 5.25, 11.0, 19.75, 20.0):
            left = calculate_peak_in_band(spectrum, 2.0, split)
            right = calculate_peak_in_band(spectrum, split, 20.0)
            assert whole == max(left, right)

    def test_lines_outside_analysis_range_excluded(self) -> None:
        spectrum = make_spectrum(_LINES, min_frequency_hz=5.0, analysis_max_hz=8.0)
        assert calculate_peak_in_band(spectrum, 0.0, 9.0) == 4.0

    def test_band_outside_analysis_range_is_zero(self) -> None:
        spectrum = make_spectrum(_LINES, min_frequency_hz=5.0)
        assert calculate_peak_in_band(spectrum, 1.0, 4.0) == 0.0
        assert spectrum.band_peaks == {(1, 4): 0.0}

    def test_out_of_range_leaves_cache_untouched(self) -> None:
        spectrum = make_spectrum(_LINES)
        with pytest.raises(OutOfRangeError):
            calculate_peak_in_band(spectrum, 3.0, 1.0)
        assert spectrum.band_peaks == {}


class TestCalculateBandPeaks:
    def test_consecutive_bands(self) -> None:
        spectrum = make_spectrum(_LINES)
        peaks = calculate_band_peaks(spectrum, 4.0)
        assert peaks == {(0.0, 4.0): 9.0, (4.0, 8.0): 9.0, (8.0, 9.0): 6.0}
        assert set(spectrum.band_peaks) == {(0, 4), (4, 8), (8, 9)}

    def test_bands_start_at_analysis_minimum(self) -> None:
        spectrum = make_spectrum(_LINES, min_frequency_hz=5.0)
        peaks = calculate_band_peaks(spectrum, 2.5)
        assert list(peaks) == [(5.0, 7.5), (7.5, 9.0)]
        assert peaks[(5.0, 7.5)] == 4.0

    @pytest.mark.parametrize("width", [0.0, -1.0, float("inf")])
    def test_bad_width(self, width: float) -> None:
        with pytest.raises(OutOfRangeError):
            calculate_band_peaks(make_spectrum(_LINES), width)
