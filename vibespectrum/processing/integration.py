"""Frequency-domain integration and differentiation of magnitude spectra.

One integration step divides line ``i`` by ``2*pi*f_i`` and moves the
quantity one step toward displacement; one differentiation step multiplies
by ``2*pi*f_i`` and moves it back toward acceleration.

The DC line has no finite integral.  Its value is fixed to ``0.0`` in both
directions, so an integrate/differentiate round trip reproduces every line
except DC, which comes back as exactly zero.
"""

from __future__ import annotations

import logging

import numpy as np

from ..domain_models import SpectrumResult

LOGGER = logging.getLogger(__name__)


def _angular_frequencies(spectrum: SpectrumResult) -> np.ndarray:
    return 2.0 * np.pi * spectrum.frequencies()


def integrate_spectrum(spectrum: SpectrumResult) -> SpectrumResult:
    """Integrate *spectrum* one step (acceleration→velocity→displacement).

    Raises :class:`~vibespectrum.errors.InvalidOperationError` for a
    displacement spectrum.
    """
    target = spectrum.quantity.integrated()
    if spectrum.high_pass_hz <= 0:
        LOGGER.warning(
            "Integrating %s spectrum without a high-pass corner; "
            "low-frequency lines will be strongly amplified",
            spectrum.quantity.value,
        )
    omega = _angular_frequencies(spectrum)
    out = np.zeros(spectrum.line_count, dtype=np.float64)
    out[1:] = spectrum.magnitudes[1:] / omega[1:]
    return spectrum.derive(out, target)


def differentiate_spectrum(spectrum: SpectrumResult) -> SpectrumResult:
    """Differentiate *spectrum* one step (displacement→velocity→acceleration).

    Raises :class:`~vibespectrum.errors.InvalidOperationError` for an
    acceleration spectrum.
    """
    target = spectrum.quantity.differentiated()
    omega = _angular_frequencies(spectrum)
    out = np.zeros(spectrum.line_count, dtype=np.float64)
    out[1:] = spectrum.magnitudes[1:] * omega[1:]
    return spectrum.derive(out, target)
