"""Shared physical and analysis constants, single source of truth.

Every numeric literal that appears in more than one module should live here
so that a change only needs to happen in one place.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Acquisition limits
# ---------------------------------------------------------------------------
MAX_LINES: Final[int] = 102_400
"""Largest supported number of spectral lines."""

MIN_LINES: Final[int] = 2
"""A spectrum needs at least DC plus one line to define a resolution."""

MAX_SAMPLE_RATE_HZ: Final[float] = 131_072.0
"""Highest sample rate accepted for an input waveform."""

MAX_WAVEFORM_SECONDS: Final[float] = 5 * 60.0
"""Longest waveform (in seconds of signal) accepted by the estimator."""

SAMPLE_RATE_FACTOR: Final[float] = 2.56
"""Recommended ratio between sample rate and maximum analysis frequency.
Anything between 2.0 (Nyquist) and this leaves no room for the anti-alias
filter roll-off and is accepted with a warning."""

MAX_ZERO_PAD_FACTOR: Final[int] = 8
"""A waveform may be zero-padded to at most this multiple of its length."""

# ---------------------------------------------------------------------------
# Window coefficient cache
# ---------------------------------------------------------------------------
WINDOW_CACHE_MAXSIZE: Final[int] = 64
"""Maximum number of cached window coefficient arrays."""

# ---------------------------------------------------------------------------
# Rotational-order analysis
# ---------------------------------------------------------------------------
SECONDS_PER_MINUTE: Final[float] = 60.0
"""Hz-to-RPM conversion factor (RPM = Hz × 60)."""

PEAK_THRESHOLD_FLOOR_RATIO: Final[float] = 2.6
"""Smallest multiple of the noise floor a line must exceed to count as a peak."""

NOISE_FLOOR_PERCENTILE: Final[float] = 0.50
"""Percentile of in-band magnitudes used as the noise floor estimate (median)."""

SPEED_FALSE_ALARM_PROBABILITY: Final[float] = 1e-4
"""Chance that the largest line of a pure-noise search band clears the speed
threshold.  Noise magnitudes are Rayleigh distributed, so the threshold
multiple grows with the number of lines searched."""
