from __future__ import annotations

import logging
import math
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .analysis.speed import SpeedSettings
from .domain_models import WindowType
from .errors import InvalidConfigurationError
from .processing.estimator import SpectrumSettings
from .worker_pool import DEFAULT_MAX_WORKERS

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

VALID_STORAGE_BACKENDS: tuple[str, ...] = ("memory", "sqlite")

DEFAULT_CONFIG: dict[str, Any] = {
    "spectrum": {
        "number_of_lines": 1600,
        "window": "hanning",
        "min_frequency_hz": 0.0,
        "max_frequency_hz": 1000.0,
        "high_pass_hz": 0.0,
        "low_pass_hz": 0.0,
        "band_width_hz": 25.0,
    },
    "speed": {
        "min_shaft_hz": 1.0,
        "max_shaft_hz": 200.0,
        "order": 1,
        "threshold_ratio": 2.6,
        "min_magnitude": 0.0,
    },
    "storage": {
        "backend": "memory",
        "history_db_path": "data/spectra.db",
    },
    "processing": {
        "max_workers": DEFAULT_MAX_WORKERS,
    },
}


def documented_default_config() -> dict[str, Any]:
    """Return runtime defaults in the shape documented by config.example.yaml."""
    return deepcopy(DEFAULT_CONFIG)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_config_path(path_text: str, config_path: Path) -> Path:
    path = Path(path_text)
    if path.is_absolute():
        return path
    return config_path.resolve().parent / path


def _number(section: str, key: str, raw: Any) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidConfigurationError(f"{section}.{key} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise InvalidConfigurationError(f"{section}.{key} must be finite, got {raw!r}")
    return value


def _integer(section: str, key: str, raw: Any) -> int:
    value = _number(section, key, raw)
    if value != int(value):
        raise InvalidConfigurationError(f"{section}.{key} must be an integer, got {raw!r}")
    return int(value)


@dataclass(slots=True)
class SpectrumConfig:
    number_of_lines: int
    window: WindowType
    min_frequency_hz: float
    max_frequency_hz: float
    high_pass_hz: float
    low_pass_hz: float
    band_width_hz: float

    def __post_init__(self) -> None:
        if self.band_width_hz <= 0:
            raise InvalidConfigurationError(
                f"spectrum.band_width_hz must be positive, got {self.band_width_hz!r}"
            )
        if self.band_width_hz > self.max_frequency_hz:
            raise InvalidConfigurationError(
                f"spectrum.band_width_hz ({self.band_width_hz}) cannot exceed "
                f"spectrum.max_frequency_hz ({self.max_frequency_hz})"
            )
        self.to_settings().validate()

    def to_settings(self) -> SpectrumSettings:
        return SpectrumSettings(
            number_of_lines=self.number_of_lines,
            window_type=self.window,
            min_frequency_hz=self.min_frequency_hz,
            max_frequency_hz=self.max_frequency_hz,
            high_pass_hz=self.high_pass_hz,
            low_pass_hz=self.low_pass_hz,
        )


@dataclass(slots=True)
class SpeedConfig:
    min_shaft_hz: float
    max_shaft_hz: float
    order: float
    threshold_ratio: float
    min_magnitude: float

    def __post_init__(self) -> None:
        self.to_settings().validate()

    def to_settings(self) -> SpeedSettings:
        return SpeedSettings(
            min_shaft_hz=self.min_shaft_hz,
            max_shaft_hz=self.max_shaft_hz,
            order=self.order,
            threshold_ratio=self.threshold_ratio,
            min_magnitude=self.min_magnitude,
        )


@dataclass(slots=True)
class StorageConfig:
    backend: str
    history_db_path: Path

    def __post_init__(self) -> None:
        if self.backend not in VALID_STORAGE_BACKENDS:
            raise InvalidConfigurationError(
                f"storage.backend must be one of {', '.join(VALID_STORAGE_BACKENDS)}, "
                f"got {self.backend!r}"
            )


@dataclass(slots=True)
class ProcessingConfig:
    max_workers: int

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            LOGGER.warning(
                "processing.max_workers=%s is below minimum 1; clamped to 1",
                self.max_workers,
            )
            self.max_workers = 1


@dataclass(slots=True)
class AppConfig:
    spectrum: SpectrumConfig
    speed: SpeedConfig
    storage: StorageConfig
    processing: ProcessingConfig
    config_path: Path

    def spectrum_settings(self) -> SpectrumSettings:
        return self.spectrum.to_settings()

    def speed_settings(self) -> SpeedSettings:
        return self.speed.to_settings()


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a YAML object at the top level.")
        return data


def load_config(config_path: Path | None = None) -> AppConfig:
    path = (config_path or DEFAULT_CONFIG_PATH).resolve()
    override = _read_config_file(path)
    merged = _deep_merge(DEFAULT_CONFIG, override)
    spectrum_cfg = merged["spectrum"]
    speed_cfg = merged["speed"]
    storage_cfg = merged["storage"]

    try:
        window = WindowType.parse(spectrum_cfg["window"])
    except ValueError:
        raise InvalidConfigurationError(
            f"spectrum.window must be hanning or rectangular, got {spectrum_cfg['window']!r}"
        ) from None

    def spectrum_value(key: str) -> float:
        return _number("spectrum", key, spectrum_cfg.get(key, DEFAULT_CONFIG["spectrum"][key]))

    def speed_value(key: str) -> float:
        return _number("speed", key, speed_cfg.get(key, DEFAULT_CONFIG["speed"][key]))

    app_config = AppConfig(
        spectrum=SpectrumConfig(
            number_of_lines=_integer(
                "spectrum", "number_of_lines", spectrum_cfg["number_of_lines"]
            ),
            window=window,
            min_frequency_hz=spectrum_value("min_frequency_hz"),
            max_frequency_hz=spectrum_value("max_frequency_hz"),
            high_pass_hz=spectrum_value("high_pass_hz"),
            low_pass_hz=spectrum_value("low_pass_hz"),
            band_width_hz=spectrum_value("band_width_hz"),
        ),
        speed=SpeedConfig(
            min_shaft_hz=speed_value("min_shaft_hz"),
            max_shaft_hz=speed_value("max_shaft_hz"),
            order=speed_value("order"),
            threshold_ratio=speed_value("threshold_ratio"),
            min_magnitude=speed_value("min_magnitude"),
        ),
        storage=StorageConfig(
            backend=str(storage_cfg.get("backend", "memory")).strip().lower(),
            history_db_path=_resolve_config_path(
                str(
                    storage_cfg.get(
                        "history_db_path", DEFAULT_CONFIG["storage"]["history_db_path"]
                    )
                ),
                path,
            ),
        ),
        processing=ProcessingConfig(
            max_workers=_integer(
                "processing", "max_workers", merged["processing"].get("max_workers", 4)
            ),
        ),
        config_path=path,
    )
    LOGGER.info(
        "Loaded config=%s storage=%s history_db_path=%s",
        app_config.config_path,
        app_config.storage.backend,
        app_config.storage.history_db_path,
    )
    return app_config
