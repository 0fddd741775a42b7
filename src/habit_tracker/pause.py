"""File-backed pause switch that can be toggled from another process."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PauseGate:
    """Tracking is paused while the marker file exists."""

    def __init__(self, marker_path: Path) -> None:
        self.marker_path = Path(marker_path)

    def pause(self) -> None:
        self.marker_path.parent.mkdir(parents=True, exist_ok=True)
        self.marker_path.touch(exist_ok=True)

    def resume(self) -> None:
        self.marker_path.unlink(missing_ok=True)

    def is_paused(self) -> bool:
        try:
            return self.marker_path.exists()
        except OSError:
            logger.warning(
                "Could not check pause marker %s; assuming not paused.",
                self.marker_path,
                exc_info=True,
            )
            return False
