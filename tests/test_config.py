from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from vibespectrum.config import documented_default_config, load_config
from vibespectrum.domain_models import WindowType
from vibespectrum.errors import InvalidConfigurationError

REPO_ROOT = Path(__file__).resolve().parents[1]


def _write(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")
    return path


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "absent.yaml")
    assert cfg.spectrum.number_of_lines == 1600
    assert cfg.spectrum.window is WindowType.HANNING
    assert cfg.spectrum.band_width_hz == 25.0
    assert cfg.speed.order == 1.0
    assert cfg.storage.backend == "memory"
    assert cfg.processing.max_workers == 4


def test_example_config_matches_defaults() -> None:
    example = yaml.safe_load((REPO_ROOT / "config.example.yaml").read_text(encoding="utf-8"))
    assert example == documented_default_config()


def test_partial_override_merges_with_defaults(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        {"spectrum": {"number_of_lines": 800, "window": "Rectangular", "max_frequency_hz": 500}},
    )
    cfg = load_config(path)
    settings = cfg.spectrum_settings()
    assert settings.number_of_lines == 800
    assert settings.window_type is WindowType.RECTANGULAR
    assert settings.max_frequency_hz == 500.0
    assert settings.min_frequency_hz == 0.0
    assert cfg.config_path == path.resolve()


def test_speed_settings_from_config(tmp_path: Path) -> None:
    path = _write(tmp_path, {"speed": {"order": 2, "max_shaft_hz": 100}})
    speed = load_config(path).speed_settings()
    assert speed.order == 2.0
    assert speed.max_shaft_hz == 100.0
    assert speed.min_shaft_hz == 1.0


def test_relative_db_path_resolved_against_config_dir(tmp_path: Path) -> None:
    path = _write(tmp_path, {"storage": {"backend": "SQLite", "history_db_path": "db/s.db"}})
    cfg = load_config(path)
    assert cfg.storage.backend == "sqlite"
    assert cfg.storage.history_db_path == tmp_path.resolve() / "db" / "s.db"


def test_absolute_db_path_kept(tmp_path: Path) -> None:
    target = tmp_path / "elsewhere.db"
    cfg = load_config(_write(tmp_path, {"storage": {"history_db_path": str(target)}}))
    assert cfg.storage.history_db_path == target


def test_top_level_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="YAML object"):
        load_config(_write(tmp_path, ["not", "a", "mapping"]))


@pytest.mark.parametrize(
    "override",
    [
        {"spectrum": {"window": "blackman"}},
        {"spectrum": {"number_of_lines": 10.5}},
        {"spectrum": {"number_of_lines": "many"}},
        {"spectrum": {"number_of_lines": 0}},
        {"spectrum": {"min_frequency_hz": 600, "max_frequency_hz": 500}},
        {"spectrum": {"high_pass_hz": 200, "low_pass_hz": 100}},
        {"spectrum": {"band_width_hz": 0}},
        {"spectrum": {"band_width_hz": 5000}},
        {"speed": {"order": 0}},
        {"speed": {"min_shaft_hz": 300}},
        {"storage": {"backend": "postgres"}},
    ],
)
def test_invalid_values_rejected(tmp_path: Path, override: dict) -> None:
    with pytest.raises(InvalidConfigurationError):
        load_config(_write(tmp_path, override))


def test_max_workers_clamped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write(tmp_path, {"processing": {"max_workers": 0}})
    with caplog.at_level(logging.WARNING, logger="vibespectrum.config"):
        cfg = load_config(path)
    assert cfg.processing.max_workers == 1
    assert "clamped" in caplog.text
