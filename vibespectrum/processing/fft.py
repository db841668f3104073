"""Pure spectral-analysis functions used by the spectrum estimator.

All functions in this module are stateless: they take arrays (and scalar
parameters) and return results without touching any shared mutable state.
This makes them independently testable and reusable outside of the
:class:`~vibespectrum.processing.estimator.SpectrumEstimator` class.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from ..constants import MAX_ZERO_PAD_FACTOR, NOISE_FLOOR_PERCENTILE
from ..domain_models import WindowType
from ..errors import InvalidInputError
from .window import amplitude_correction, window_coefficients

LOGGER = logging.getLogger(__name__)


def fft_length(sample_rate_hz: float, number_of_lines: int, max_frequency_hz: float) -> int:
    """FFT size giving at least ``number_of_lines`` lines up to ``max_frequency_hz``.

    ``n_fft = ceil(fs * (lines - 1) / fmax)`` so the resulting resolution
    ``fs / n_fft`` never exceeds ``fmax / (lines - 1)``.
    """
    raw = sample_rate_hz * (number_of_lines - 1) / max_frequency_hz
    # Guard against float noise pushing an exact ratio to the next integer.
    n_fft = int(math.ceil(raw - 1e-9))
    return max(2, n_fft)


def magnitude_spectrum(block: np.ndarray, window: np.ndarray, n_fft: int) -> np.ndarray:
    """Single-sided amplitude spectrum of one windowed block.

    *block* may be shorter than *n_fft*; ``np.fft.rfft`` zero-pads it.
    Scaling by ``2 / sum(window)`` makes a bin-centred sinusoid of
    amplitude ``A`` show up as ``A``.  DC and (for even *n_fft*) Nyquist
    have no mirror image, so they are halved back.
    """
    windowed = block * window
    spec = np.abs(np.fft.rfft(windowed, n=n_fft))
    spec *= amplitude_correction(window)
    if spec.size > 0:
        spec[0] *= 0.5
    if (n_fft % 2) == 0 and spec.size > 1:
        spec[-1] *= 0.5
    return spec


def averaged_magnitude_spectrum(
    samples: np.ndarray,
    n_fft: int,
    window_type: WindowType,
) -> tuple[np.ndarray, int]:
    """Magnitude spectrum of *samples* at FFT size *n_fft*.

    Length policy:

    - shorter than *n_fft*: zero-padded, as long as the padding factor
      stays within ``MAX_ZERO_PAD_FACTOR``; otherwise the waveform is too
      short to support the requested resolution.
    - longer than *n_fft*: split into consecutive non-overlapping blocks
      whose magnitude spectra are averaged; the trailing partial block is
      dropped (logged).

    Returns ``(spectrum, averages)``.
    """
    count = int(samples.size)
    if count < n_fft:
        if count * MAX_ZERO_PAD_FACTOR < n_fft:
            raise InvalidInputError(
                f"Waveform too short: {count} samples cannot support an FFT of "
                f"{n_fft} points (max zero-pad factor {MAX_ZERO_PAD_FACTOR})"
            )
        LOGGER.debug("Zero-padding %d samples to FFT length %d", count, n_fft)
        window = window_coefficients(count, window_type)
        return magnitude_spectrum(samples, window, n_fft), 1

    blocks = count // n_fft
    dropped = count - blocks * n_fft
    if dropped:
        LOGGER.debug(
            "Averaging %d blocks of %d samples; %d trailing samples dropped",
            blocks,
            n_fft,
            dropped,
        )
    window = window_coefficients(n_fft, window_type)
    frames = samples[: blocks * n_fft].reshape(blocks, n_fft)
    total = np.zeros(n_fft // 2 + 1, dtype=np.float64)
    for frame in frames:
        total += magnitude_spectrum(frame, window, n_fft)
    return total / blocks, blocks


def apply_pass_band(
    spectrum: np.ndarray,
    resolution_hz: float,
    *,
    high_pass_hz: float = 0.0,
    low_pass_hz: float = 0.0,
) -> np.ndarray:
    """Zero the lines below the high-pass and above the low-pass corner.

    A corner of ``0`` disables that side of the filter.
    """
    filtered = np.array(spectrum, dtype=np.float64, copy=True)
    freqs = np.arange(filtered.size, dtype=np.float64) * resolution_hz
    if high_pass_hz > 0:
        filtered[freqs < high_pass_hz] = 0.0
    if low_pass_hz > 0:
        filtered[freqs > low_pass_hz] = 0.0
    return filtered


def noise_floor(amps: np.ndarray, q: float = NOISE_FLOOR_PERCENTILE) -> float:
    """Percentile noise floor (median by default) over the finite, non-negative lines."""
    finite = amps[np.isfinite(amps)]
    finite = finite[finite >= 0.0]
    if finite.size == 0:
        return 0.0
    return float(np.percentile(finite, 100.0 * min(1.0, max(0.0, q))))


def parabolic_offset(amps: np.ndarray, idx: int) -> float:
    """Sub-line offset of the vertex through lines ``idx-1, idx, idx+1``.

    Returns 0.0 at the array edges or when the three points are collinear.
    The offset is bounded to ``[-0.5, 0.5]``.
    """
    if idx <= 0 or idx >= amps.size - 1:
        return 0.0
    left, centre, right = (float(amps[idx - 1]), float(amps[idx]), float(amps[idx + 1]))
    denom = left - 2.0 * centre + right
    if abs(denom) < 1e-12:
        return 0.0
    offset = 0.5 * (left - right) / denom
    return max(-0.5, min(0.5, offset))
