"""Local activity tracker that samples the foreground app and screen."""

__version__ = "0.1.0"
