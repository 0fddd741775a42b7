"""SQLite event store for capture events."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterator, Optional

from .errors import StorageError
from .models import CaptureEvent

logger = logging.getLogger(__name__)


DATETIME_FMT = "%Y-%m-%dT%H:%M:%S"
DAY_FMT = "%Y-%m-%d"

_COLUMNS = (
    "id, captured_at, image_path, active_app, window_title, is_paused, is_private, ocr_text"
)


def open_database(path: Path) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database in WAL mode."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(
            path,
            isolation_level=None,
            timeout=30,
        )
    except (OSError, sqlite3.Error) as exc:
        raise StorageError(f"Could not open database at {path}: {exc}") from exc

    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        initialize_schema(conn)
    except sqlite3.Error as exc:
        conn.close()
        raise StorageError(f"Could not initialize database at {path}: {exc}") from exc
    return conn


@contextmanager
def database_connection(path: Path) -> Iterator[sqlite3.Connection]:
    conn = open_database(path)
    try:
        yield conn
    finally:
        conn.close()


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS captures (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            captured_at TEXT NOT NULL,
            image_path TEXT,
            active_app TEXT NOT NULL,
            window_title TEXT NOT NULL DEFAULT '',
            is_paused INTEGER NOT NULL DEFAULT 0,
            is_private INTEGER NOT NULL DEFAULT 0,
            ocr_text TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_captures_captured_at
            ON captures(captured_at);
        """
    )
    migrate_ocr_column(conn)


def migrate_ocr_column(conn: sqlite3.Connection) -> None:
    """Add ``ocr_text`` to stores created before OCR support existed."""
    columns = {row["name"] for row in conn.execute("PRAGMA table_info(captures);")}
    if "ocr_text" in columns:
        return
    try:
        conn.execute("ALTER TABLE captures ADD COLUMN ocr_text TEXT;")
    except sqlite3.OperationalError as exc:
        # Another process may have migrated the store in between.
        if "duplicate column" not in str(exc).lower():
            raise
    else:
        logger.info("Added ocr_text column to captures table.")


def insert_event(conn: sqlite3.Connection, event: CaptureEvent) -> int:
    """Append one event and return the id assigned by the store."""
    if event.ocr_text is not None and event.image_path is None:
        raise ValueError("ocr_text requires an image_path")
    try:
        cur = conn.execute(
            """
            INSERT INTO captures (
                captured_at,
                image_path,
                active_app,
                window_title,
                is_paused,
                is_private,
                ocr_text
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.captured_at.strftime(DATETIME_FMT),
                str(event.image_path) if event.image_path is not None else None,
                event.active_app,
                event.window_title,
                1 if event.is_paused else 0,
                1 if event.is_private else 0,
                event.ocr_text,
            ),
        )
    except sqlite3.Error as exc:
        raise StorageError(f"Could not insert capture: {exc}") from exc
    return int(cur.lastrowid)


def fetch_events_for_day(conn: sqlite3.Connection, day: date) -> list[CaptureEvent]:
    """Fetch the events captured on ``day`` in chronological order."""
    start = date(day.year, day.month, day.day)
    end = start + timedelta(days=1)
    try:
        rows = conn.execute(
            f"""
            SELECT {_COLUMNS}
            FROM captures
            WHERE captured_at >= ? AND captured_at < ?
            ORDER BY captured_at ASC, id ASC;
            """,
            (start.strftime(DAY_FMT), end.strftime(DAY_FMT)),
        ).fetchall()
    except sqlite3.Error as exc:
        raise StorageError(f"Could not query captures: {exc}") from exc
    return [row_to_event(row) for row in rows]


def fetch_events_missing_ocr(conn: sqlite3.Connection, limit: int) -> list[CaptureEvent]:
    """Return up to ``limit`` events that have an image but no OCR text, newest first."""
    if limit <= 0:
        raise ValueError("limit must be positive")
    try:
        rows = conn.execute(
            f"""
            SELECT {_COLUMNS}
            FROM captures
            WHERE ocr_text IS NULL AND image_path IS NOT NULL
            ORDER BY captured_at DESC, id DESC
            LIMIT ?;
            """,
            (limit,),
        ).fetchall()
    except sqlite3.Error as exc:
        raise StorageError(f"Could not query captures: {exc}") from exc
    return [row_to_event(row) for row in rows]


def update_ocr_text(conn: sqlite3.Connection, event_id: int, text: str) -> None:
    """Set the OCR text of a single event that has an image."""
    try:
        cur = conn.execute(
            "UPDATE captures SET ocr_text = ? WHERE id = ? AND image_path IS NOT NULL",
            (text, event_id),
        )
    except sqlite3.Error as exc:
        raise StorageError(f"Could not update capture {event_id}: {exc}") from exc
    if cur.rowcount == 0:
        raise LookupError(f"No capture with an image found for id={event_id}")


def row_to_event(row: sqlite3.Row) -> CaptureEvent:
    image_path: Optional[Path] = Path(row["image_path"]) if row["image_path"] else None
    return CaptureEvent(
        id=int(row["id"]),
        captured_at=datetime.strptime(row["captured_at"], DATETIME_FMT),
        image_path=image_path,
        active_app=row["active_app"],
        window_title=row["window_title"] or "",
        is_paused=bool(row["is_paused"]),
        is_private=bool(row["is_private"]),
        ocr_text=row["ocr_text"],
    )
