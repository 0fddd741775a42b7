"""Exception hierarchy shared across the tracker."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for errors raised by the tracker."""


class ConfigurationError(TrackerError):
    """Invalid settings; only raised while starting up."""


class StorageError(TrackerError):
    """The event store could not be opened, read or written."""


class SignalSetupError(TrackerError):
    """Shutdown signal handlers could not be installed."""


class CollaboratorError(TrackerError):
    """An OS-level capture facility failed."""


class MetadataError(CollaboratorError):
    """The foreground application or window title could not be queried."""


class ScreenshotError(CollaboratorError):
    """A screenshot could not be taken or written to disk."""


class OcrError(CollaboratorError):
    """Text recognition failed for an image."""
