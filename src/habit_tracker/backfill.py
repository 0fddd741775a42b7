"""Deferred OCR for captures stored without text."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Callable, Optional

from .db import fetch_events_missing_ocr, update_ocr_text
from .errors import OcrError, StorageError
from .models import CaptureEvent
from .ocr import OcrEngine

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[CaptureEvent, Optional[str], Optional[Exception]], None]


@dataclass(slots=True)
class BackfillResult:
    processed: int = 0
    updated: int = 0
    failed: int = 0


def backfill_missing_ocr(
    conn: sqlite3.Connection,
    ocr_engine: OcrEngine,
    limit: int,
    on_progress: Optional[ProgressCallback] = None,
) -> BackfillResult:
    """OCR up to ``limit`` of the newest captures that have an image but no text.

    Empty recognition results are stored as ``""`` so the row is not selected
    again. Failures are logged and counted; the row stays pending.
    """
    result = BackfillResult()
    for event in fetch_events_missing_ocr(conn, limit):
        result.processed += 1
        try:
            text = ocr_engine.recognize(event.image_path)
            update_ocr_text(conn, event.id, text)
        except (OcrError, StorageError, LookupError) as exc:
            logger.warning("OCR backfill failed for capture %s: %s", event.id, exc)
            result.failed += 1
            if on_progress:
                on_progress(event, None, exc)
            continue
        result.updated += 1
        if on_progress:
            on_progress(event, text, None)
    logger.info(
        "OCR backfill processed %d captures (%d updated, %d failed).",
        result.processed,
        result.updated,
        result.failed,
    )
    return result
