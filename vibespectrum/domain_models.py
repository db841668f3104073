"""Domain model objects for the spectral engine.

Typed dataclasses and enums shared by processing, analysis and storage.
``SpectrumResult`` keeps a stable JSON contract through
:meth:`SpectrumResult.to_dict` / :meth:`SpectrumResult.from_dict` so stored
results survive a round trip unchanged.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np

from .errors import InvalidInputError, InvalidOperationError

# ---------------------------------------------------------------------------
# 1) Enumerations
# ---------------------------------------------------------------------------


class WindowType(str, Enum):
    HANNING = "hanning"
    RECTANGULAR = "rectangular"

    @classmethod
    def parse(cls, value: WindowType | str) -> WindowType:
        """Accept an enum member or a case-insensitive name/value."""
        if isinstance(value, cls):
            return value
        token = str(value).strip().lower()
        if token == "hann":
            token = cls.HANNING.value
        for member in cls:
            if member.value == token:
                return member
        raise ValueError(f"Unknown window type: {value!r}")


class Quantity(str, Enum):
    """Physical quantity of a waveform or spectrum.

    Members are ordered along the integration chain
    ``ACCELERATION -> VELOCITY -> DISPLACEMENT``; only adjacent steps are
    available, so multi-step jumps cannot be expressed.
    """

    ACCELERATION = "acceleration"
    VELOCITY = "velocity"
    DISPLACEMENT = "displacement"

    @classmethod
    def parse(cls, value: Quantity | str) -> Quantity:
        if isinstance(value, cls):
            return value
        token = str(value).strip().lower()
        for member in cls:
            if member.value == token:
                return member
        raise ValueError(f"Unknown quantity: {value!r}")

    @property
    def rank(self) -> int:
        return _QUANTITY_CHAIN.index(self)

    def integrated(self) -> Quantity:
        """Quantity one integration step toward displacement."""
        if self.rank + 1 >= len(_QUANTITY_CHAIN):
            raise InvalidOperationError(f"Cannot integrate {self.value} any further")
        return _QUANTITY_CHAIN[self.rank + 1]

    def differentiated(self) -> Quantity:
        """Quantity one differentiation step toward acceleration."""
        if self.rank == 0:
            raise InvalidOperationError(f"Cannot differentiate {self.value} any further")
        return _QUANTITY_CHAIN[self.rank - 1]


_QUANTITY_CHAIN: tuple[Quantity, ...] = (
    Quantity.ACCELERATION,
    Quantity.VELOCITY,
    Quantity.DISPLACEMENT,
)


# ---------------------------------------------------------------------------
# 2) TimeWaveform
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class TimeWaveform:
    samples: np.ndarray
    sample_rate_hz: float
    quantity: Quantity = Quantity.ACCELERATION

    def __post_init__(self) -> None:
        try:
            samples = np.array(self.samples, dtype=np.float64)
        except (TypeError, ValueError):
            raise InvalidInputError("Waveform samples must be numeric") from None
        if samples.ndim != 1:
            raise InvalidInputError(
                f"Waveform samples must be one-dimensional, got shape {samples.shape}"
            )
        if samples.size < 2:
            raise InvalidInputError(
                f"Waveform needs at least 2 samples, got {samples.size}"
            )
        if not np.all(np.isfinite(samples)):
            raise InvalidInputError("Waveform samples must be finite")
        try:
            rate = float(self.sample_rate_hz)
        except (TypeError, ValueError):
            raise InvalidInputError(f"Invalid sample rate: {self.sample_rate_hz!r}") from None
        if not math.isfinite(rate) or rate <= 0:
            raise InvalidInputError(f"Sample rate must be positive, got {self.sample_rate_hz!r}")
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate_hz", rate)
        object.__setattr__(self, "quantity", Quantity.parse(self.quantity))

    @property
    def sample_count(self) -> int:
        return int(self.samples.size)

    @property
    def duration_s(self) -> float:
        return self.sample_count / self.sample_rate_hz


# ---------------------------------------------------------------------------
# 3) SpectrumResult
# ---------------------------------------------------------------------------

BandKey = tuple[int, int]


@dataclass(slots=True, frozen=True, eq=False)
class SpectrumResult:
    """Single-sided magnitude spectrum of one waveform.

    ``magnitudes`` is read-only once the result exists.  ``band_peaks`` maps
    ``(start_idx, end_idx)`` line-index pairs to the peak magnitude found in
    that band; it is a memo cache filled by the band peak extractor, not
    authoritative state.
    """

    magnitudes: np.ndarray
    resolution_hz: float
    quantity: Quantity
    window_type: WindowType = WindowType.HANNING
    min_frequency_hz: float = 0.0
    analysis_max_hz: float | None = None
    high_pass_hz: float = 0.0
    averages: int = 1
    band_peaks: dict[BandKey, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        mags = np.array(self.magnitudes, dtype=np.float64)
        if mags.ndim != 1 or mags.size < 2:
            raise InvalidInputError(
                f"Spectrum needs a 1-D array of at least 2 lines, got shape {mags.shape}"
            )
        resolution = float(self.resolution_hz)
        if not math.isfinite(resolution) or resolution <= 0:
            raise InvalidInputError(f"Spectrum resolution must be positive, got {resolution!r}")
        mags.setflags(write=False)
        object.__setattr__(self, "magnitudes", mags)
        object.__setattr__(self, "resolution_hz", resolution)
        object.__setattr__(self, "quantity", Quantity.parse(self.quantity))
        object.__setattr__(self, "window_type", WindowType.parse(self.window_type))
        max_hz = resolution * (mags.size - 1)
        analysis_max = max_hz if self.analysis_max_hz is None else float(self.analysis_max_hz)
        object.__setattr__(self, "analysis_max_hz", min(analysis_max, max_hz))
        object.__setattr__(self, "min_frequency_hz", max(0.0, float(self.min_frequency_hz)))
        last = mags.size - 1
        for start, end in self.band_peaks:
            if not (0 <= start <= end <= last):
                raise InvalidInputError(
                    f"Band key {(start, end)!r} outside line range [0, {last}]"
                )

    # -- derived ---------------------------------------------------------------

    @property
    def line_count(self) -> int:
        return int(self.magnitudes.size)

    @property
    def max_frequency_hz(self) -> float:
        return self.resolution_hz * (self.line_count - 1)

    def frequencies(self) -> np.ndarray:
        return np.arange(self.line_count, dtype=np.float64) * self.resolution_hz

    def analysis_index_range(self) -> tuple[int, int]:
        """Inclusive line-index range covered by the analysis frequency range."""
        lo = int(math.ceil(self.min_frequency_hz / self.resolution_hz - 1e-9))
        hi = int(math.floor(float(self.analysis_max_hz) / self.resolution_hz + 1e-9))
        return max(0, lo), min(self.line_count - 1, hi)

    def derive(self, magnitudes: np.ndarray, quantity: Quantity) -> SpectrumResult:
        """New result with the same bookkeeping, new lines and an empty peak table."""
        return SpectrumResult(
            magnitudes=magnitudes,
            resolution_hz=self.resolution_hz,
            quantity=quantity,
            window_type=self.window_type,
            min_frequency_hz=self.min_frequency_hz,
            analysis_max_hz=self.analysis_max_hz,
            high_pass_hz=self.high_pass_hz,
            averages=self.averages,
        )

    # -- comparison ------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpectrumResult):
            return NotImplemented
        return (
            self.resolution_hz == other.resolution_hz
            and self.quantity is other.quantity
            and self.window_type is other.window_type
            and self.min_frequency_hz == other.min_frequency_hz
            and self.analysis_max_hz == other.analysis_max_hz
            and self.high_pass_hz == other.high_pass_hz
            and self.averages == other.averages
            and self.band_peaks == other.band_peaks
            and np.array_equal(self.magnitudes, other.magnitudes)
        )

    __hash__ = None  # type: ignore[assignment]

    # -- serialization ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "quantity": self.quantity.value,
            "window_type": self.window_type.value,
            "resolution_hz": self.resolution_hz,
            "min_frequency_hz": self.min_frequency_hz,
            "analysis_max_hz": self.analysis_max_hz,
            "high_pass_hz": self.high_pass_hz,
            "averages": self.averages,
            "magnitudes": self.magnitudes.tolist(),
            "band_peaks": [
                [start, end, value] for (start, end), value in sorted(self.band_peaks.items())
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpectrumResult:
        try:
            band_peaks = {
                (int(start), int(end)): float(value)
                for start, end, value in data.get("band_peaks") or []
            }
            return cls(
                magnitudes=np.asarray(data["magnitudes"], dtype=np.float64),
                resolution_hz=float(data["resolution_hz"]),
                quantity=Quantity.parse(data["quantity"]),
                window_type=WindowType.parse(data.get("window_type", WindowType.HANNING)),
                min_frequency_hz=float(data.get("min_frequency_hz", 0.0)),
                analysis_max_hz=(
                    float(data["analysis_max_hz"])
                    if data.get("analysis_max_hz") is not None
                    else None
                ),
                high_pass_hz=float(data.get("high_pass_hz", 0.0)),
                averages=int(data.get("averages", 1)),
                band_peaks=band_peaks,
            )
        except (KeyError, TypeError, ValueError) as exc:
            if isinstance(exc, InvalidInputError):
                raise
            raise InvalidInputError(f"Malformed spectrum payload: {exc}") from exc
