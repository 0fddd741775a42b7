from __future__ import annotations

from pathlib import Path

import pytest

from habit_tracker.config import TrackerSettings, read_config_file
from habit_tracker.errors import ConfigurationError


def test_defaults_live_under_data_dir(isolated_home: Path) -> None:
    settings = TrackerSettings.load()
    assert settings.interval_seconds == 60
    assert settings.jpeg_quality == 60
    assert settings.db_path == isolated_home / "tracker.sqlite3"
    assert settings.images_dir.is_dir()
    assert settings.pause_file == isolated_home / "pause"


def test_file_values_override_defaults(tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text(
        'interval_seconds = 120\njpeg_quality = 90\nimages_dir = "{}"\nunknown = 1\n'.format(
            (tmp_path / "shots").as_posix()
        ),
        encoding="utf-8",
    )
    settings = TrackerSettings.load(config)
    assert settings.interval_seconds == 120
    assert settings.jpeg_quality == 90
    assert settings.images_dir == tmp_path / "shots"
    assert settings.images_dir.is_dir()


def test_cli_overrides_file(tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text("interval_seconds = 120\njpeg_quality = 90\n", encoding="utf-8")
    settings = TrackerSettings.load(config, interval_seconds=30)
    assert settings.interval_seconds == 30
    assert settings.jpeg_quality == 90


@pytest.mark.parametrize("overrides", [{"interval_seconds": 0}, {"jpeg_quality": 101}])
def test_invalid_values_are_rejected(tmp_path: Path, overrides: dict) -> None:
    with pytest.raises(ConfigurationError):
        TrackerSettings.load(tmp_path / "missing.toml", **overrides)


def test_malformed_file_is_a_configuration_error(tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text("interval_seconds = [", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        read_config_file(config)


def test_wrong_type_in_file_is_a_configuration_error(tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text('interval_seconds = "often"\n', encoding="utf-8")
    with pytest.raises(ConfigurationError):
        read_config_file(config)
