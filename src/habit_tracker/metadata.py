"""Foreground application and window title probes for each platform."""

from __future__ import annotations

import ctypes
import logging
import shutil
import subprocess
import sys
from typing import Optional, Protocol

import psutil

from .errors import MetadataError

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT_SECONDS = 10.0

_APP_SCRIPT = (
    'tell application "System Events" to get name of first process whose frontmost is true'
)
_TITLE_SCRIPT = (
    'tell application "System Events" to get name of front window '
    "of first process whose frontmost is true"
)


class ActiveWindowProbe(Protocol):
    def active_app(self) -> str: ...

    def window_title(self) -> str: ...


def _run_command(args: list[str]) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(
            args,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=COMMAND_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.SubprocessError, UnicodeError) as exc:
        raise MetadataError(f"{args[0]} failed: {exc}") from exc


class MacActiveWindowProbe:
    """Queries System Events through ``osascript``."""

    def active_app(self) -> str:
        result = _run_command(["osascript", "-e", _APP_SCRIPT])
        if result.returncode != 0:
            raise MetadataError(f"osascript failed: {result.stderr.strip()}")
        return result.stdout.strip()

    def window_title(self) -> str:
        result = _run_command(["osascript", "-e", _TITLE_SCRIPT])
        if result.returncode != 0:
            # Some apps do not expose a front window.
            return ""
        return result.stdout.strip()


class WindowsActiveWindowProbe:
    """Retrieves the foreground window title and process name."""

    def __init__(self) -> None:
        from ctypes import wintypes

        self._wintypes = wintypes
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]

    def _foreground_window(self) -> int:
        hwnd = self._user32.GetForegroundWindow()
        if not hwnd:
            raise MetadataError("No foreground window.")
        return hwnd

    def active_app(self) -> str:
        hwnd = self._foreground_window()
        pid = self._wintypes.DWORD()
        self._user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
        if not pid.value:
            raise MetadataError("Foreground window has no owning process.")
        try:
            return psutil.Process(pid.value).name()
        except (psutil.Error, ProcessLookupError) as exc:
            raise MetadataError(f"Could not resolve process {pid.value}: {exc}") from exc

    def window_title(self) -> str:
        hwnd = self._foreground_window()
        length = self._user32.GetWindowTextLengthW(hwnd)
        buffer = ctypes.create_unicode_buffer(length + 1)
        self._user32.GetWindowTextW(hwnd, buffer, length + 1)
        return buffer.value.strip()


class XdotoolActiveWindowProbe:
    """X11 probe built on ``xdotool`` and ``psutil``."""

    def active_app(self) -> str:
        result = _run_command(["xdotool", "getactivewindow", "getwindowpid"])
        if result.returncode != 0:
            raise MetadataError(f"xdotool failed: {result.stderr.strip()}")
        try:
            pid = int(result.stdout.strip())
            return psutil.Process(pid).name()
        except ValueError as exc:
            raise MetadataError(f"Unexpected xdotool output: {result.stdout!r}") from exc
        except (psutil.Error, ProcessLookupError) as exc:
            raise MetadataError(f"Could not resolve foreground process: {exc}") from exc

    def window_title(self) -> str:
        result = _run_command(["xdotool", "getactivewindow", "getwindowname"])
        if result.returncode != 0:
            return ""
        return result.stdout.strip()


class UnsupportedProbe:
    def __init__(self, reason: str) -> None:
        self.reason = reason

    def active_app(self) -> str:
        raise MetadataError(self.reason)

    def window_title(self) -> str:
        raise MetadataError(self.reason)


def default_probe(platform: Optional[str] = None) -> ActiveWindowProbe:
    """Pick the probe for the running platform."""
    platform = platform or sys.platform
    if platform == "darwin":
        return MacActiveWindowProbe()
    if platform == "win32":
        return WindowsActiveWindowProbe()
    if shutil.which("xdotool"):
        return XdotoolActiveWindowProbe()
    logger.warning("xdotool not found; active window metadata is unavailable.")
    return UnsupportedProbe(f"No active window probe available on {platform}")
