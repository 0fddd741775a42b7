"""Command-line interface for the habit tracker."""

from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import typer

from .config import TrackerSettings
from .errors import TrackerError
from .paths import get_log_path

if TYPE_CHECKING:
    from .models import CaptureEvent
    from .ocr import OcrEngine

app = typer.Typer(help="Local-first activity tracker with screenshots and OCR.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def _load_settings(**overrides: object) -> TrackerSettings:
    try:
        return TrackerSettings.load(**overrides)  # type: ignore[arg-type]
    except TrackerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _attach_log_file() -> None:
    handler = logging.FileHandler(get_log_path(), encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)


@app.command()
def start(
    interval: Optional[int] = typer.Option(
        None, "--interval", "-i", min=1, help="Capture interval in seconds."
    ),
    quality: Optional[int] = typer.Option(
        None, "--quality", "-q", min=0, max=100, help="JPEG quality (0-100)."
    ),
    ocr: Optional[bool] = typer.Option(
        None,
        "--ocr/--no-ocr",
        help="Run OCR while capturing (otherwise leave it for 'ocr --batch').",
    ),
) -> None:
    """Run the capture loop until interrupted."""
    from .collector import ActivityCollector

    settings = _load_settings(
        interval_seconds=interval, jpeg_quality=quality, ocr_on_capture=ocr
    )
    _attach_log_file()
    try:
        collector = ActivityCollector(settings)
        collector.run_forever()
    except TrackerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def pause() -> None:
    """Pause tracking until 'resume' is run."""
    from .pause import PauseGate

    settings = _load_settings()
    PauseGate(settings.pause_file).pause()
    typer.echo("Tracking paused.")


@app.command()
def resume() -> None:
    """Resume tracking after 'pause'."""
    from .pause import PauseGate

    settings = _load_settings()
    PauseGate(settings.pause_file).resume()
    typer.echo("Tracking resumed.")


@app.command()
def status() -> None:
    """Show whether tracking is paused."""
    from .pause import PauseGate

    settings = _load_settings()
    paused = PauseGate(settings.pause_file).is_paused()
    typer.echo("Tracking is paused." if paused else "Tracking is active.")


@app.command()
def report(
    day: Optional[str] = typer.Option(
        None,
        "--date",
        "-d",
        help="Date (YYYY-MM-DD) to report. Defaults to today.",
    ),
    today: bool = typer.Option(False, "--today", "-t", help="Report on today."),
) -> None:
    """Print the timeline and time per application for one day."""
    from .reporting import ReportPrinter

    if day and today:
        raise typer.BadParameter("--date and --today cannot be used together.")
    target = _parse_day(day) if day else date.today()

    settings = _load_settings()
    printer = ReportPrinter(db_path=settings.db_path, interval_seconds=settings.interval_seconds)
    try:
        printer.print_daily_report(target)
    except TrackerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def ocr(
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", path_type=Path, help="Image to run OCR on."
    ),
    batch: Optional[int] = typer.Option(
        None, "--batch", "-b", min=1, help="OCR up to N stored captures that have no text yet."
    ),
) -> None:
    """Extract text from one image or from stored captures."""
    from .ocr import TesseractOcr

    if file is None and batch is None:
        typer.echo("Specify --file or --batch.", err=True)
        raise typer.Exit(code=2)

    settings = _load_settings()
    engine = TesseractOcr(settings.ocr_languages)

    if file is not None:
        try:
            text = engine.recognize(file)
        except TrackerError as exc:
            typer.echo(f"OCR error: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        typer.echo(text if text else "No text detected.")
        return

    _run_backfill(settings, engine, batch)


def _run_backfill(settings: TrackerSettings, engine: "OcrEngine", limit: int) -> None:
    from .backfill import backfill_missing_ocr
    from .db import database_connection

    def _progress(
        event: "CaptureEvent", text: Optional[str], error: Optional[Exception]
    ) -> None:
        if error is not None:
            typer.echo(f"{event.image_path} ... failed: {error}")
            return
        preview = " ".join((text or "").split())
        if len(preview) > 50:
            preview = f"{preview[:50]}..."
        typer.echo(f"{event.image_path} ... OK ({preview})")

    try:
        with database_connection(settings.db_path) as conn:
            result = backfill_missing_ocr(conn, engine, limit, on_progress=_progress)
    except TrackerError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if result.processed == 0:
        typer.echo("No captures are waiting for OCR.")
    else:
        typer.echo(f"Processed {result.processed} captures: {result.updated} updated, {result.failed} failed.")


def _parse_day(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid date {value!r}; expected YYYY-MM-DD.") from exc
