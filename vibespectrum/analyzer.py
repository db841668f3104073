"""Spectrum analyzer facade.

``SpectrumAnalyzer`` gathers the spectral engine behind one object with the
operation set of a classic spectrum calculation module: configuration
setters, spectrum calculation, integration, band peaks, trends, machine
speed and result storage.  Every collaborator (store, speed estimator,
worker pool) is injected, so tests can run against the in-memory store.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from .analysis import (
    SpeedEstimator,
    calculate_band_peaks,
    calculate_peak_in_band,
    get_peak_in_band_trend,
)
from .config import AppConfig
from .domain_models import SpectrumResult, TimeWaveform, WindowType
from .errors import InvalidConfigurationError
from .history_db import HistoryDB
from .processing import (
    SpectrumEstimator,
    SpectrumSettings,
    differentiate_spectrum,
    integrate_spectrum,
)
from .spectrum_store import InMemorySpectrumStore, SpectrumStore
from .worker_pool import WorkerPool

LOGGER = logging.getLogger(__name__)


class SpectrumAnalyzer:
    def __init__(
        self,
        *,
        store: SpectrumStore | None = None,
        settings: SpectrumSettings | None = None,
        speed_estimator: SpeedEstimator | None = None,
        worker_pool: WorkerPool | None = None,
        band_width_hz: float = 25.0,
    ) -> None:
        self.estimator = SpectrumEstimator(settings)
        self.store: SpectrumStore = store if store is not None else InMemorySpectrumStore()
        self.speed_estimator = speed_estimator or SpeedEstimator()
        self.band_width_hz = float(band_width_hz)
        # Owned externally when injected.
        self._worker_pool = worker_pool

    # -- configuration ----------------------------------------------------------

    @property
    def settings(self) -> SpectrumSettings:
        return self.estimator.settings

    def set_number_of_lines(self, lines: int) -> None:
        self.estimator.set_number_of_lines(lines)

    def set_window_type(self, window_type: WindowType | str) -> None:
        self.estimator.set_window_type(window_type)

    def set_min_frequency(self, frequency_hz: float) -> None:
        self.estimator.set_min_frequency(frequency_hz)

    def set_max_frequency(self, frequency_hz: float) -> None:
        self.estimator.set_max_frequency(frequency_hz)

    def set_high_pass_frequency(self, frequency_hz: float) -> None:
        self.estimator.set_high_pass_frequency(frequency_hz)

    def set_low_pass_frequency(self, frequency_hz: float) -> None:
        self.estimator.set_low_pass_frequency(frequency_hz)

    def set_band_range(self, band_width_hz: float) -> None:
        """Width of the consecutive bands used by :meth:`calculate_band_peaks`."""
        try:
            width = float(band_width_hz)
        except (TypeError, ValueError):
            raise InvalidConfigurationError(
                f"Band range must be a number, got {band_width_hz!r}"
            ) from None
        if not math.isfinite(width) or width <= 0:
            raise InvalidConfigurationError(f"Band range must be positive, got {band_width_hz!r}")
        max_hz = self.settings.max_frequency_hz
        if width > max_hz:
            raise InvalidConfigurationError(
                f"Band range {width:g} Hz cannot be larger than max frequency {max_hz:g} Hz"
            )
        self.band_width_hz = width

    # -- spectra ----------------------------------------------------------------

    def calculate_spectrum(self, waveform: TimeWaveform) -> SpectrumResult:
        return self.estimator.calculate_spectrum(waveform)

    def calculate_spectra(self, waveforms: Sequence[TimeWaveform]) -> list[SpectrumResult]:
        return self.estimator.calculate_spectra(waveforms, pool=self._worker_pool)

    def integrate_spectrum(self, spectrum: SpectrumResult) -> SpectrumResult:
        return integrate_spectrum(spectrum)

    def differentiate_spectrum(self, spectrum: SpectrumResult) -> SpectrumResult:
        return differentiate_spectrum(spectrum)

    # -- bands --------------------------------------------------------------------

    def calculate_peak_in_band(
        self, spectrum: SpectrumResult, start_freq: float, end_freq: float
    ) -> float:
        return calculate_peak_in_band(spectrum, start_freq, end_freq)

    def calculate_band_peaks(
        self, spectrum: SpectrumResult, band_width_hz: float | None = None
    ) -> dict[tuple[float, float], float]:
        width = self.band_width_hz if band_width_hz is None else band_width_hz
        return calculate_band_peaks(spectrum, width)

    def get_peak_in_band_trend(
        self, start_date: str, end_date: str, start_freq: float, end_freq: float
    ) -> dict[str, float]:
        return get_peak_in_band_trend(self.store, start_date, end_date, start_freq, end_freq)

    # -- speed ----------------------------------------------------------------------

    def calculate_machine_speed(
        self,
        date: str,
        spectral_data: SpectrumResult | Iterable[SpectrumResult] | None = None,
    ) -> float:
        """Estimated RPM for *date*; loads the stored spectrum when none is given."""
        if spectral_data is None:
            spectral_data = self.store.retrieve(date)
        return self.speed_estimator.calculate_machine_speed(date, spectral_data)

    # -- storage ----------------------------------------------------------------------

    def store_spectrum_result(self, timestamp: str, result: SpectrumResult) -> None:
        self.store.store(timestamp, result)

    def retrieve_spectrum_result(self, timestamp: str) -> SpectrumResult:
        return self.store.retrieve(timestamp)


def build_analyzer(
    config: AppConfig, *, worker_pool: WorkerPool | None = None
) -> SpectrumAnalyzer:
    """Wire a :class:`SpectrumAnalyzer` from a loaded :class:`AppConfig`."""
    store: SpectrumStore
    if config.storage.backend == "sqlite":
        store = HistoryDB(config.storage.history_db_path)
    else:
        store = InMemorySpectrumStore()
    if worker_pool is None and config.processing.max_workers > 1:
        worker_pool = WorkerPool(max_workers=config.processing.max_workers)
    LOGGER.info(
        "Built analyzer: backend=%s lines=%d window=%s range=%.1f-%.1f Hz",
        config.storage.backend,
        config.spectrum.number_of_lines,
        config.spectrum.window.value,
        config.spectrum.min_frequency_hz,
        config.spectrum.max_frequency_hz,
    )
    return SpectrumAnalyzer(
        store=store,
        settings=config.spectrum_settings(),
        speed_estimator=SpeedEstimator(config.speed_settings()),
        worker_pool=worker_pool,
        band_width_hz=config.spectrum.band_width_hz,
    )
