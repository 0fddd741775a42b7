"""Screenshot capture into the dated image hierarchy."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import mss
from mss.exception import ScreenShotError as GrabError
from PIL import Image

from .errors import ScreenshotError

IMAGE_SUFFIX = ".jpg"


class ScreenCapturer:
    """Grabs every monitor and stores a JPEG at ``images_dir/YYYY-MM-DD/HHMMSS.jpg``."""

    def __init__(self, images_dir: Path, jpeg_quality: int = 60) -> None:
        self.images_dir = Path(images_dir)
        self.jpeg_quality = jpeg_quality

    def path_for(self, timestamp: datetime) -> Path:
        return (
            self.images_dir
            / timestamp.strftime("%Y-%m-%d")
            / (timestamp.strftime("%H%M%S") + IMAGE_SUFFIX)
        )

    def capture(self, timestamp: datetime) -> Path:
        target = self.path_for(timestamp)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with mss.mss() as sct:
                # Monitor 0 is the bounding box of all monitors.
                shot = sct.grab(sct.monitors[0])
            image = Image.frombytes("RGB", shot.size, shot.bgra, "raw", "BGRX")
            image.save(target, format="JPEG", quality=self.jpeg_quality, optimize=True)
        except (OSError, GrabError, ValueError) as exc:
            raise ScreenshotError(f"Screenshot to {target} failed: {exc}") from exc
        return target
