"""Machine speed estimation from the dominant shaft-order peak.

The search band ``[min_shaft_hz, max_shaft_hz]`` (intersected with the
spectrum's analysis range, DC excluded) is scanned for its strongest line.
That line only counts when it clears the noise threshold
``max(median floor * ratio, min_magnitude)``.  Noise magnitudes are Rayleigh
distributed, so ``ratio`` is the larger of ``threshold_ratio`` and the
multiple of the median that the largest of the band's lines exceeds only with
probability ``SPEED_FALSE_ALARM_PROBABILITY``.  A spectrum with no such line
yields :class:`InsufficientDataError` rather than a speed read off the noise.
The peak frequency is refined by a three-point parabolic fit and divided by
the assumed shaft order to get the rotational frequency.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from statistics import median

import numpy as np

from ..constants import (
    PEAK_THRESHOLD_FLOOR_RATIO,
    SECONDS_PER_MINUTE,
    SPEED_FALSE_ALARM_PROBABILITY,
)
from ..domain_models import SpectrumResult
from ..errors import InsufficientDataError, InvalidConfigurationError
from ..processing.fft import noise_floor, parabolic_offset

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SpeedSettings:
    min_shaft_hz: float = 1.0
    max_shaft_hz: float = 200.0
    order: float = 1.0
    threshold_ratio: float = PEAK_THRESHOLD_FLOOR_RATIO
    min_magnitude: float = 0.0

    def validate(self) -> None:
        for name in ("min_shaft_hz", "max_shaft_hz", "threshold_ratio", "min_magnitude"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
                raise InvalidConfigurationError(
                    f"speed.{name} must be a non-negative number, got {value!r}"
                )
        if self.max_shaft_hz <= self.min_shaft_hz:
            raise InvalidConfigurationError(
                f"speed.max_shaft_hz ({self.max_shaft_hz}) must exceed "
                f"speed.min_shaft_hz ({self.min_shaft_hz})"
            )
        if not isinstance(self.order, (int, float)) or not self.order > 0:
            raise InvalidConfigurationError(f"speed.order must be positive, got {self.order!r}")


@dataclass(slots=True, frozen=True)
class SpeedEstimate:
    rpm: float
    peak_hz: float
    peak_magnitude: float
    noise_floor: float
    threshold: float
    order: float


def rayleigh_peak_ratio(
    line_count: int, false_alarm: float = SPEED_FALSE_ALARM_PROBABILITY
) -> float:
    """Multiple of the median that the largest of *line_count* Rayleigh lines
    exceeds with probability *false_alarm*."""
    count = max(1, int(line_count))
    return math.sqrt(math.log(count / false_alarm) / math.log(2.0))


class SpeedEstimator:
    def __init__(self, settings: SpeedSettings | None = None) -> None:
        settings = settings or SpeedSettings()
        settings.validate()
        self.settings = settings

    def _search_lines(self, spectrum: SpectrumResult) -> tuple[int, int]:
        res = spectrum.resolution_hz
        lo = int(math.ceil(self.settings.min_shaft_hz / res - 1e-9))
        hi = int(math.floor(self.settings.max_shaft_hz / res + 1e-9))
        a_lo, a_hi = spectrum.analysis_index_range()
        return max(lo, a_lo, 1), min(hi, a_hi)

    def estimate(self, spectrum: SpectrumResult) -> SpeedEstimate:
        """Estimate speed from one spectrum."""
        lo, hi = self._search_lines(spectrum)
        if lo > hi:
            raise InsufficientDataError(
                f"Search band {self.settings.min_shaft_hz:g}-{self.settings.max_shaft_hz:g} Hz "
                "holds no spectral lines"
            )
        band = spectrum.magnitudes[lo : hi + 1]
        floor = noise_floor(band)
        ratio = max(self.settings.threshold_ratio, rayleigh_peak_ratio(band.size))
        threshold = max(floor * ratio, self.settings.min_magnitude)
        idx = lo + int(np.argmax(band))
        peak = float(spectrum.magnitudes[idx])
        if not peak > threshold:
            raise InsufficientDataError(
                f"No peak above noise threshold {threshold:.6g} (floor {floor:.6g}) "
                f"in {self.settings.min_shaft_hz:g}-{self.settings.max_shaft_hz:g} Hz"
            )
        offset = parabolic_offset(spectrum.magnitudes, idx)
        peak_hz = (idx + offset) * spectrum.resolution_hz
        shaft_hz = peak_hz / self.settings.order
        return SpeedEstimate(
            rpm=shaft_hz * SECONDS_PER_MINUTE,
            peak_hz=peak_hz,
            peak_magnitude=peak,
            noise_floor=floor,
            threshold=threshold,
            order=self.settings.order,
        )

    def calculate_machine_speed(
        self,
        date: str,
        spectral_data: SpectrumResult | Iterable[SpectrumResult],
    ) -> float:
        """Estimated RPM for *date* from one spectrum or a collection of them.

        Every spectrum is estimated on its own; spectra without a qualifying
        peak are skipped and the median of the remaining estimates is
        returned.
        """
        if isinstance(spectral_data, SpectrumResult):
            spectra = [spectral_data]
        else:
            spectra = list(spectral_data)
        estimates: list[float] = []
        for spectrum in spectra:
            try:
                estimates.append(self.estimate(spectrum).rpm)
            except InsufficientDataError as exc:
                LOGGER.debug("Skipping spectrum for %s: %s", date, exc)
        if not estimates:
            raise InsufficientDataError(
                f"No spectrum for {date} has a qualifying speed peak "
                f"({len(spectra)} spectra examined)"
            )
        rpm = float(median(estimates))
        LOGGER.debug("Machine speed for %s: %.1f RPM from %d spectra", date, rpm, len(estimates))
        return rpm
