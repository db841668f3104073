"""Signal processing package.

This package contains the spectral engine:

- :mod:`~vibespectrum.processing.window`: Hanning / Rectangular windows and their cache.
- :mod:`~vibespectrum.processing.fft`: pure FFT / spectral-analysis functions.
- :mod:`~vibespectrum.processing.estimator`: the configurable
  :class:`SpectrumEstimator` and its :class:`SpectrumSettings` value.
- :mod:`~vibespectrum.processing.integration`: frequency-domain
  integration and differentiation.
"""

from .estimator import SpectrumEstimator, SpectrumSettings, compute_spectrum
from .integration import differentiate_spectrum, integrate_spectrum
from .window import WindowCache, amplitude_correction, apply_window, window_coefficients

__all__ = [
    "SpectrumEstimator",
    "SpectrumSettings",
    "WindowCache",
    "amplitude_correction",
    "apply_window",
    "compute_spectrum",
    "differentiate_spectrum",
    "integrate_spectrum",
    "window_coefficients",
]
