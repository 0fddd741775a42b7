"""Configuration models and helpers for the habit tracker."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigurationError
from .paths import get_config_path, get_db_path, get_images_dir, get_pause_file

logger = logging.getLogger(__name__)


class FileSettings(BaseModel):
    """Optional overrides read from ``config.toml``."""

    model_config = ConfigDict(extra="ignore")

    interval_seconds: Optional[int] = None
    jpeg_quality: Optional[int] = None
    db_path: Optional[Path] = None
    images_dir: Optional[Path] = None
    pause_file: Optional[Path] = None
    ocr_languages: Optional[str] = None
    ocr_on_capture: Optional[bool] = None


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for the collector and the reports."""

    interval_seconds: int = 60
    jpeg_quality: int = 60
    db_path: Path = field(default_factory=get_db_path)
    images_dir: Path = field(default_factory=get_images_dir)
    pause_file: Path = field(default_factory=get_pause_file)
    ocr_languages: str = "eng"
    ocr_on_capture: bool = True

    @classmethod
    def load(
        cls,
        config_path: Optional[Path] = None,
        *,
        interval_seconds: Optional[int] = None,
        jpeg_quality: Optional[int] = None,
        ocr_on_capture: Optional[bool] = None,
    ) -> "TrackerSettings":
        """Build settings from defaults, the config file and CLI overrides.

        CLI overrides win over the file, the file wins over the defaults.
        The result is validated and its directories are created.
        """
        settings = cls()
        path = config_path or get_config_path()
        if path.exists():
            settings = settings.merge(read_config_file(path))

        overrides = {
            "interval_seconds": interval_seconds,
            "jpeg_quality": jpeg_quality,
            "ocr_on_capture": ocr_on_capture,
        }
        settings = replace(
            settings, **{key: value for key, value in overrides.items() if value is not None}
        )
        settings.validate()
        settings.ensure_directories()
        return settings

    def merge(self, file_settings: FileSettings) -> "TrackerSettings":
        values = file_settings.model_dump(exclude_none=True)
        for key in ("db_path", "images_dir", "pause_file"):
            if key in values:
                values[key] = Path(values[key]).expanduser()
        return replace(self, **values)

    def validate(self) -> None:
        if self.interval_seconds <= 0:
            raise ConfigurationError("interval_seconds must be greater than 0")
        if not 0 <= self.jpeg_quality <= 100:
            raise ConfigurationError("jpeg_quality must be between 0 and 100")
        if not self.ocr_languages.strip():
            raise ConfigurationError("ocr_languages must not be empty")

    def ensure_directories(self) -> None:
        try:
            self.images_dir.mkdir(parents=True, exist_ok=True)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.pause_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(f"Could not create data directories: {exc}") from exc


def read_config_file(path: Path) -> FileSettings:
    """Parse and validate a TOML configuration file."""
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Could not read {path}: {exc}") from exc

    try:
        file_settings = FileSettings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings in {path}: {exc}") from exc
    logger.debug("Loaded settings from %s", path)
    return file_settings
