from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import FakeOcr
from habit_tracker import ocr as ocr_module
from habit_tracker.cli import app
from habit_tracker.db import database_connection, fetch_events_missing_ocr, insert_event
from habit_tracker.models import CaptureEvent

runner = CliRunner()


def test_pause_resume_status(isolated_home: Path) -> None:
    result = runner.invoke(app, ["pause"])
    assert result.exit_code == 0
    assert (isolated_home / "pause").exists()
    assert "paused" in runner.invoke(app, ["status"]).output

    result = runner.invoke(app, ["resume"])
    assert result.exit_code == 0
    assert not (isolated_home / "pause").exists()
    assert "active" in runner.invoke(app, ["status"]).output


def test_report_empty_day(isolated_home: Path) -> None:
    result = runner.invoke(app, ["report", "--date", "2024-12-30"])
    assert result.exit_code == 0
    assert "No captures recorded for 2024-12-30." in result.output
    assert (isolated_home / "tracker.sqlite3").exists()


def test_report_with_data(isolated_home: Path) -> None:
    with database_connection(isolated_home / "tracker.sqlite3") as conn:
        insert_event(conn, CaptureEvent(captured_at=datetime(2024, 12, 30, 9, 0), active_app="Code"))
    result = runner.invoke(app, ["report", "-d", "2024-12-30"])
    assert result.exit_code == 0
    assert "09:00:00 | Code" in result.output


@pytest.mark.parametrize(
    "args",
    [["report", "--date", "2024-12-30", "--today"], ["report", "--date", "2024-13-45"]],
)
def test_report_rejects_bad_arguments(args: list[str]) -> None:
    assert runner.invoke(app, args).exit_code == 2


def test_ocr_requires_a_mode() -> None:
    assert runner.invoke(app, ["ocr"]).exit_code == 2


def test_ocr_batch_updates_pending_captures(
    isolated_home: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    db_path = isolated_home / "tracker.sqlite3"
    with database_connection(db_path) as conn:
        insert_event(
            conn,
            CaptureEvent(
                captured_at=datetime(2024, 12, 30, 9, 0),
                active_app="Code",
                image_path=Path("/img/a.jpg"),
            ),
        )
    monkeypatch.setattr(ocr_module, "TesseractOcr", lambda languages: FakeOcr(text="hello"))

    result = runner.invoke(app, ["ocr", "--batch", "5"])

    assert result.exit_code == 0
    assert "1 updated" in result.output
    with database_connection(db_path) as conn:
        assert fetch_events_missing_ocr(conn, 5) == []


def test_ocr_file_prints_text(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ocr_module, "TesseractOcr", lambda languages: FakeOcr(text=""))
    result = runner.invoke(app, ["ocr", "--file", str(tmp_path / "shot.jpg")])
    assert result.exit_code == 0
    assert "No text detected." in result.output


def test_start_rejects_invalid_interval() -> None:
    assert runner.invoke(app, ["start", "--interval", "0"]).exit_code == 2
