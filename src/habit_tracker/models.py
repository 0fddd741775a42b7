"""Domain models for recorded activity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional


UNKNOWN_APP = "Unknown"


@dataclass(slots=True)
class CaptureEvent:
    """One sample of foreground activity taken by a capture cycle."""

    captured_at: datetime
    active_app: str
    window_title: str = ""
    image_path: Optional[Path] = None
    ocr_text: Optional[str] = None
    is_paused: bool = False
    is_private: bool = False
    id: Optional[int] = None

    @property
    def day(self) -> str:
        return self.captured_at.strftime("%Y-%m-%d")


@dataclass(slots=True)
class TimelineEntry:
    time: str
    active_app: str
    window_title: str


@dataclass(slots=True)
class AppSummary:
    """Estimated time spent in one application over a day."""

    app_name: str
    capture_count: int
    duration_seconds: int
