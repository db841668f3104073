"""Vibration spectrum analysis for condition monitoring."""

from .analysis import SpeedEstimator, SpeedSettings, calculate_peak_in_band
from .analyzer import SpectrumAnalyzer, build_analyzer
from .config import AppConfig, load_config
from .domain_models import Quantity, SpectrumResult, TimeWaveform, WindowType
from .errors import (
    InsufficientDataError,
    InvalidConfigurationError,
    InvalidInputError,
    InvalidOperationError,
    NotFoundError,
    OutOfRangeError,
    SpectrumError,
)
from .history_db import HistoryDB
from .processing import SpectrumEstimator, SpectrumSettings, integrate_spectrum
from .spectrum_store import InMemorySpectrumStore, SpectrumStore

__all__ = [
    "AppConfig",
    "HistoryDB",
    "InMemorySpectrumStore",
    "InsufficientDataError",
    "InvalidConfigurationError",
    "InvalidInputError",
    "InvalidOperationError",
    "NotFoundError",
    "OutOfRangeError",
    "Quantity",
    "SpectrumAnalyzer",
    "SpectrumError",
    "SpectrumEstimator",
    "SpectrumResult",
    "SpectrumSettings",
    "SpectrumStore",
    "SpeedEstimator",
    "SpeedSettings",
    "TimeWaveform",
    "WindowType",
    "build_analyzer",
    "calculate_peak_in_band",
    "integrate_spectrum",
    "load_config",
]
