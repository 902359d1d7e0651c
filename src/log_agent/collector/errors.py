"""Exceptions raised by the log collection agent."""

from __future__ import annotations

from pathlib import Path


class LogCollectError(Exception):
    """Base class for all log agent errors."""


class StatusPersistError(LogCollectError):
    """Writing a stream status marker failed."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to persist status marker {self.path}: {reason}")


class ConfigError(LogCollectError):
    """The agent configuration could not be loaded."""


class PostError(LogCollectError):
    """A batch could not be delivered to the backend."""

    def __init__(self, url: str, reason: str, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"POST {url} failed: {reason}")
