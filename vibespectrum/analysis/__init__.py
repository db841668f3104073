"""vibespectrum.analysis – consumers of computed spectra.

Band peak extraction, machine speed estimation and peak trends over stored
spectra.  External code imports through this module-level API.
"""

from .band_peaks import (
    band_frequency_bounds,
    band_key,
    calculate_band_peaks,
    calculate_peak_in_band,
)
from .speed import SpeedEstimate, SpeedEstimator, SpeedSettings, rayleigh_peak_ratio
from .trend import get_peak_in_band_trend

__all__ = [
    "SpeedEstimate",
    "SpeedEstimator",
    "SpeedSettings",
    "band_frequency_bounds",
    "band_key",
    "calculate_band_peaks",
    "calculate_peak_in_band",
    "get_peak_in_band_trend",
    "rayleigh_peak_ratio",
]
