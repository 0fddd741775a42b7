"""Helpers for locating application directories."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "HabitTracker"
APP_AUTHOR = "HabitTracker"
HOME_ENV_VAR = "HABIT_TRACKER_HOME"


def get_data_dir() -> Path:
    """Return the base directory for persistent data."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        path = Path(override).expanduser()
    else:
        dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
        path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_db_path() -> Path:
    return get_data_dir() / "tracker.sqlite3"


def get_images_dir() -> Path:
    return get_data_dir() / "images"


def get_pause_file() -> Path:
    return get_data_dir() / "pause"


def get_config_path() -> Path:
    return get_data_dir() / "config.toml"


def get_log_path() -> Path:
    return get_data_dir() / "collector.log"
