"""Capture loop that samples the foreground app, screen and OCR text."""

from __future__ import annotations

import logging
import signal
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

from .config import TrackerSettings
from .db import insert_event, open_database
from .errors import CollaboratorError, SignalSetupError, StorageError
from .metadata import ActiveWindowProbe, default_probe
from .models import UNKNOWN_APP, CaptureEvent
from .ocr import OcrEngine, TesseractOcr
from .pause import PauseGate
from .screenshot import ScreenCapturer

logger = logging.getLogger(__name__)


class Screenshotter(Protocol):
    def capture(self, timestamp: datetime) -> Path: ...


class ActivityCollector:
    """Samples foreground activity at a fixed interval and writes one row per cycle."""

    def __init__(
        self,
        settings: TrackerSettings,
        *,
        conn: Optional[sqlite3.Connection] = None,
        probe: Optional[ActiveWindowProbe] = None,
        screenshotter: Optional[Screenshotter] = None,
        ocr_engine: Optional[OcrEngine] = None,
        pause_gate: Optional[PauseGate] = None,
    ) -> None:
        self.settings = settings
        self._owns_conn = conn is None
        self._conn = conn if conn is not None else open_database(settings.db_path)
        self._probe = probe if probe is not None else default_probe()
        self._screenshotter = screenshotter or ScreenCapturer(
            settings.images_dir, settings.jpeg_quality
        )
        if ocr_engine is None and settings.ocr_on_capture:
            ocr_engine = TesseractOcr(settings.ocr_languages)
        self._ocr = ocr_engine
        self._pause_gate = pause_gate or PauseGate(settings.pause_file)
        self.stop_event = threading.Event()

    def install_signal_handlers(self) -> None:
        """Set the stop event on SIGINT/SIGTERM; must run on the main thread."""

        def _request_stop(signum: int, _frame: object) -> None:
            logger.info("Received %s; stopping after the current cycle.", signal.Signals(signum).name)
            self.stop_event.set()

        try:
            signal.signal(signal.SIGINT, _request_stop)
            signal.signal(signal.SIGTERM, _request_stop)
        except (ValueError, OSError) as exc:
            raise SignalSetupError(f"Could not install signal handlers: {exc}") from exc

    def run_forever(self) -> None:
        try:
            self.install_signal_handlers()
        except SignalSetupError:
            self._shutdown()
            raise
        self.run_until_stopped(self.stop_event)

    def run_until_stopped(self, stop_event: threading.Event) -> None:
        """Run the collector until the provided event is set."""
        try:
            self._run_loop(stop_event)
        finally:
            self._shutdown()

    def _run_loop(self, stop_event: threading.Event) -> None:
        interval = self.settings.interval_seconds
        logger.info(
            "Starting collector every %ss; writing to %s", interval, self.settings.db_path
        )
        while not stop_event.is_set():
            if self._pause_gate.is_paused():
                logger.debug("Tracking paused; skipping cycle.")
            else:
                try:
                    self.capture_once()
                except Exception:  # noqa: BLE001
                    logger.exception("Capture cycle failed; continuing.")
            # Sleep in an interruptible manner.
            stop_event.wait(interval)

    def capture_once(self, now: Optional[datetime] = None) -> Optional[CaptureEvent]:
        """Run one capture cycle and store whatever could be collected.

        Each stage degrades to a missing field on failure. Returns the stored
        event, or ``None`` when the insert itself failed.
        """
        timestamp = (now or datetime.now()).replace(microsecond=0)

        try:
            active_app = self._probe.active_app() or UNKNOWN_APP
        except CollaboratorError as exc:
            logger.warning("Could not read active application: %s", exc)
            active_app = UNKNOWN_APP
        except Exception:  # noqa: BLE001
            logger.warning("Active application probe crashed.", exc_info=True)
            active_app = UNKNOWN_APP

        try:
            window_title = self._probe.window_title()
        except CollaboratorError as exc:
            logger.warning("Could not read window title: %s", exc)
            window_title = ""
        except Exception:  # noqa: BLE001
            logger.warning("Window title probe crashed.", exc_info=True)
            window_title = ""

        try:
            image_path: Optional[Path] = self._screenshotter.capture(timestamp)
        except CollaboratorError as exc:
            logger.warning("Screenshot failed: %s", exc)
            image_path = None
        except Exception:  # noqa: BLE001
            logger.warning("Screenshot capture crashed.", exc_info=True)
            image_path = None

        ocr_text = self._recognize(image_path)

        event = CaptureEvent(
            captured_at=timestamp,
            active_app=active_app,
            window_title=window_title,
            image_path=image_path,
            ocr_text=ocr_text,
        )
        try:
            event.id = insert_event(self._conn, event)
        except StorageError:
            logger.exception("Failed to record capture at %s", timestamp)
            return None
        logger.info("Captured %s (%s)", event.captured_at.strftime("%H:%M:%S"), active_app)
        return event

    def _recognize(self, image_path: Optional[Path]) -> Optional[str]:
        if image_path is None or self._ocr is None:
            return None
        try:
            text = self._ocr.recognize(image_path)
        except CollaboratorError as exc:
            logger.warning("OCR failed for %s: %s", image_path, exc)
            return None
        except Exception:  # noqa: BLE001
            logger.warning("OCR crashed for %s", image_path, exc_info=True)
            return None
        if not text:
            logger.debug("OCR found no text in %s", image_path)
            return None
        return text

    def _shutdown(self) -> None:
        try:
            if self._owns_conn:
                self._conn.close()
        finally:
            logger.info("Collector stopped.")
