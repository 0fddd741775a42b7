"""Daily timeline and per-application reports for CLI output."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Sequence

from .db import database_connection, fetch_events_for_day
from .models import AppSummary, CaptureEvent, TimelineEntry


@dataclass(slots=True)
class DailyReport:
    day: date
    timeline: list[TimelineEntry]
    apps: list[AppSummary]

    @property
    def is_empty(self) -> bool:
        return not self.timeline


def build_timeline(events: Iterable[CaptureEvent]) -> list[TimelineEntry]:
    return [
        TimelineEntry(
            time=event.captured_at.strftime("%H:%M:%S"),
            active_app=event.active_app,
            window_title=event.window_title,
        )
        for event in events
    ]


def summarize_by_app(
    events: Iterable[CaptureEvent], interval_seconds: int
) -> list[AppSummary]:
    """Estimate time per app as ``captures * interval``.

    The estimate assumes the sampling interval stayed constant all day.
    Apps with equal durations keep the order in which they first appeared.
    """
    counts: dict[str, int] = {}
    for event in events:
        counts[event.active_app] = counts.get(event.active_app, 0) + 1
    summaries = [
        AppSummary(
            app_name=app,
            capture_count=count,
            duration_seconds=count * interval_seconds,
        )
        for app, count in counts.items()
    ]
    return sorted(summaries, key=lambda item: item.duration_seconds, reverse=True)


def build_daily_report(
    conn: sqlite3.Connection, day: date, interval_seconds: int
) -> DailyReport:
    events = fetch_events_for_day(conn, day)
    return DailyReport(
        day=day,
        timeline=build_timeline(events),
        apps=summarize_by_app(events, interval_seconds),
    )


def format_duration(seconds: int) -> str:
    """Whole hours and minutes; the hour part is dropped when zero."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def render_daily_report(report: DailyReport) -> list[str]:
    day_label = report.day.strftime("%Y-%m-%d")
    if report.is_empty:
        return [f"No captures recorded for {day_label}."]

    lines = [f"Activity report for {day_label}", "=" * 40, "", "Timeline:"]
    for entry in report.timeline:
        suffix = f" - {entry.window_title}" if entry.window_title else ""
        lines.append(f"  {entry.time} | {entry.active_app}{suffix}")
    lines.extend(["", "Time by application:"])
    lines.extend(_render_apps(report.apps))
    return lines


def _render_apps(apps: Sequence[AppSummary]) -> list[str]:
    return [
        f"  {app.app_name:<30} {format_duration(app.duration_seconds):>8}"
        f"  ({app.capture_count} captures)"
        for app in apps
    ]


class ReportPrinter:
    """Render human-readable daily reports in the console."""

    def __init__(self, db_path: Path, interval_seconds: int) -> None:
        self.db_path = Path(db_path)
        self.interval_seconds = interval_seconds

    def print_daily_report(self, day: date) -> None:
        with database_connection(self.db_path) as conn:
            report = build_daily_report(conn, day, self.interval_seconds)
        for line in render_daily_report(report):
            print(line)
