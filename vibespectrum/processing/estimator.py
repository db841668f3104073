"""Spectrum estimator: configuration ownership and spectrum computation.

``SpectrumEstimator`` holds the analysis configuration (line count, window,
frequency range, optional high/low-pass corners) as an immutable
:class:`SpectrumSettings` value.  Setters swap the value under a lock and
:meth:`SpectrumEstimator.calculate_spectrum` captures one snapshot at entry,
so the estimator is safe to call from parallel worker threads while another
thread reconfigures it.
"""

from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Sequence
from dataclasses import dataclass, replace
from functools import wraps
from threading import RLock

from ..constants import (
    MAX_LINES,
    MAX_SAMPLE_RATE_HZ,
    MAX_WAVEFORM_SECONDS,
    MIN_LINES,
    SAMPLE_RATE_FACTOR,
)
from ..domain_models import SpectrumResult, TimeWaveform, WindowType
from ..errors import InvalidConfigurationError, InvalidInputError
from ..worker_pool import WorkerPool
from .fft import apply_pass_band, averaged_magnitude_spectrum, fft_length

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SpectrumSettings:
    number_of_lines: int = 1600
    window_type: WindowType = WindowType.HANNING
    min_frequency_hz: float = 0.0
    max_frequency_hz: float = 1000.0
    high_pass_hz: float = 0.0
    low_pass_hz: float = 0.0

    def __post_init__(self) -> None:
        try:
            kind = WindowType.parse(self.window_type)
        except ValueError as exc:
            raise InvalidConfigurationError(str(exc)) from None
        object.__setattr__(self, "window_type", kind)
        lines = self.number_of_lines
        if isinstance(lines, numbers.Integral) and not isinstance(lines, bool):
            object.__setattr__(self, "number_of_lines", int(lines))

    def validate(self) -> None:
        """Raise :class:`InvalidConfigurationError` for unusable settings."""
        lines = self.number_of_lines
        if isinstance(lines, bool) or not isinstance(lines, numbers.Integral):
            raise InvalidConfigurationError(f"Number of lines must be an integer, got {lines!r}")
        if lines < MIN_LINES:
            raise InvalidConfigurationError(
                f"Number of lines cannot be less than {MIN_LINES}, got {lines}"
            )
        if lines > MAX_LINES:
            raise InvalidConfigurationError(
                f"Number of lines cannot exceed {MAX_LINES}, got {lines}"
            )
        for name in ("min_frequency_hz", "max_frequency_hz", "high_pass_hz", "low_pass_hz"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
                raise InvalidConfigurationError(
                    f"{name} must be a non-negative number, got {value!r}"
                )
        if self.max_frequency_hz <= self.min_frequency_hz:
            raise InvalidConfigurationError(
                f"Maximum frequency ({self.max_frequency_hz} Hz) must exceed "
                f"minimum frequency ({self.min_frequency_hz} Hz)"
            )
        if 0 < self.low_pass_hz <= self.high_pass_hz:
            raise InvalidConfigurationError(
                f"High-pass frequency ({self.high_pass_hz} Hz) must be below "
                f"low-pass frequency ({self.low_pass_hz} Hz)"
            )

    def validate_for(self, waveform: TimeWaveform) -> None:
        """Check the settings against one waveform's sample rate and length."""
        self.validate()
        rate = waveform.sample_rate_hz
        if rate > MAX_SAMPLE_RATE_HZ:
            raise InvalidInputError(
                f"Sample rate cannot exceed {MAX_SAMPLE_RATE_HZ:g} Hz, got {rate:g} Hz"
            )
        if waveform.duration_s > MAX_WAVEFORM_SECONDS:
            raise InvalidInputError(
                f"Waveform length {waveform.duration_s:.1f} s exceeds the maximum of "
                f"{MAX_WAVEFORM_SECONDS:g} s"
            )
        nyquist = rate / 2.0
        if self.max_frequency_hz > nyquist:
            raise InvalidConfigurationError(
                f"Maximum frequency {self.max_frequency_hz:g} Hz exceeds Nyquist "
                f"({nyquist:g} Hz) for sample rate {rate:g} Hz"
            )
        if rate < self.max_frequency_hz * SAMPLE_RATE_FACTOR:
            LOGGER.warning(
                "Sample rate %.1f Hz is below %.2f x max frequency %.1f Hz; "
                "lines near the top of the range may contain aliasing",
                rate,
                SAMPLE_RATE_FACTOR,
                self.max_frequency_hz,
            )


def _synchronized(method):
    @wraps(method)
    def _wrapped(self: SpectrumEstimator, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return _wrapped


class SpectrumEstimator:
    def __init__(self, settings: SpectrumSettings | None = None) -> None:
        self._settings = settings or SpectrumSettings()
        self._lock = RLock()

    # -- configuration ----------------------------------------------------------

    @property
    def settings(self) -> SpectrumSettings:
        with self._lock:
            return self._settings

    @_synchronized
    def configure(self, settings: SpectrumSettings) -> None:
        settings.validate()
        self._settings = settings

    @_synchronized
    def set_number_of_lines(self, lines: int) -> None:
        self._settings = replace(self._settings, number_of_lines=lines)

    @_synchronized
    def set_window_type(self, window_type: WindowType | str) -> None:
        try:
            kind = WindowType.parse(window_type)
        except ValueError as exc:
            raise InvalidConfigurationError(str(exc)) from None
        self._settings = replace(self._settings, window_type=kind)

    @_synchronized
    def set_min_frequency(self, frequency_hz: float) -> None:
        self._settings = replace(self._settings, min_frequency_hz=_frequency(frequency_hz))

    @_synchronized
    def set_max_frequency(self, frequency_hz: float) -> None:
        self._settings = replace(self._settings, max_frequency_hz=_frequency(frequency_hz))

    @_synchronized
    def set_high_pass_frequency(self, frequency_hz: float) -> None:
        self._settings = replace(self._settings, high_pass_hz=_frequency(frequency_hz))

    @_synchronized
    def set_low_pass_frequency(self, frequency_hz: float) -> None:
        self._settings = replace(self._settings, low_pass_hz=_frequency(frequency_hz))

    # -- computation ------------------------------------------------------------

    def calculate_spectrum(self, waveform: TimeWaveform) -> SpectrumResult:
        return compute_spectrum(waveform, self.settings)

    def calculate_spectra(
        self,
        waveforms: Sequence[TimeWaveform],
        pool: WorkerPool | None = None,
    ) -> list[SpectrumResult]:
        """Compute several spectra with one settings snapshot.

        Runs on *pool* when given; results keep input order and the first
        failure propagates.
        """
        settings = self.settings
        if pool is None:
            return [compute_spectrum(waveform, settings) for waveform in waveforms]
        return pool.map_ordered(lambda waveform: compute_spectrum(waveform, settings), waveforms)


def _frequency(value: float) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise InvalidConfigurationError(f"Frequency must be a number, got {value!r}") from None
    if not math.isfinite(out) or out < 0:
        raise InvalidConfigurationError(f"Frequency cannot be negative, got {value!r}")
    return out


def compute_spectrum(waveform: TimeWaveform, settings: SpectrumSettings) -> SpectrumResult:
    """Compute the magnitude spectrum of *waveform* under *settings*."""
    settings.validate_for(waveform)
    lines = settings.number_of_lines
    n_fft = fft_length(waveform.sample_rate_hz, lines, settings.max_frequency_hz)
    spectrum, averages = averaged_magnitude_spectrum(
        waveform.samples, n_fft, settings.window_type
    )
    resolution = waveform.sample_rate_hz / n_fft
    spectrum = apply_pass_band(
        spectrum[:lines],
        resolution,
        high_pass_hz=settings.high_pass_hz,
        low_pass_hz=settings.low_pass_hz,
    )
    LOGGER.debug(
        "Spectrum: %d lines, n_fft=%d, resolution=%.4f Hz, averages=%d, window=%s",
        lines,
        n_fft,
        resolution,
        averages,
        settings.window_type.value,
    )
    return SpectrumResult(
        magnitudes=spectrum,
        resolution_hz=resolution,
        quantity=waveform.quantity,
        window_type=settings.window_type,
        min_frequency_hz=settings.min_frequency_hz,
        analysis_max_hz=settings.max_frequency_hz,
        high_pass_hz=settings.high_pass_hz,
        averages=averages,
    )
