from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from habit_tracker.config import TrackerSettings
from habit_tracker.db import open_database
from habit_tracker.errors import MetadataError, OcrError, ScreenshotError


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("HABIT_TRACKER_HOME", str(home))
    return home


@pytest.fixture
def settings(tmp_path: Path) -> TrackerSettings:
    return TrackerSettings(
        interval_seconds=60,
        jpeg_quality=60,
        db_path=tmp_path / "tracker.sqlite3",
        images_dir=tmp_path / "images",
        pause_file=tmp_path / "pause",
    )


@pytest.fixture
def conn(settings: TrackerSettings):
    connection = open_database(settings.db_path)
    yield connection
    connection.close()


class FakeProbe:
    def __init__(self, app: str = "Code", title: str = "main.py", fail: bool = False) -> None:
        self.app = app
        self.title = title
        self.fail = fail

    def active_app(self) -> str:
        if self.fail:
            raise MetadataError("probe unavailable")
        return self.app

    def window_title(self) -> str:
        if self.fail:
            raise MetadataError("probe unavailable")
        return self.title


class FakeScreenshotter:
    def __init__(self, root: Path, fail: bool = False) -> None:
        self.root = root
        self.fail = fail
        self.calls: list[datetime] = []

    def capture(self, timestamp: datetime) -> Path:
        self.calls.append(timestamp)
        if self.fail:
            raise ScreenshotError("no display")
        path = self.root / timestamp.strftime("%Y-%m-%d") / timestamp.strftime("%H%M%S.jpg")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"jpeg")
        return path


class FakeOcr:
    def __init__(self, text: str = "hello world", fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.calls: list[Path] = []

    def recognize(self, image_path: Path) -> str:
        self.calls.append(image_path)
        if self.fail:
            raise OcrError("tesseract missing")
        return self.text
