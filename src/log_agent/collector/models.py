"""Data models for the log collection core.

This module defines the persisted per-stream state (mirrored by the status
marker file) and the configuration record describing one log stream.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any


@dataclass
class StreamConfig:
    """Static description of one collected log stream.

    Attributes:
        name: Stream identifier, used as file prefix and sub-directory name.
        url_path: Backend endpoint suffix the stream posts to.
        collect_enable: When False, extraction is always a no-op.
    """

    name: str
    url_path: str
    collect_enable: bool = True


@dataclass
class StreamStatus:
    """Reading progress and rotation state of a single log stream.

    This is the only state that survives a process restart. It is written to
    ``<root>/logs/<name>/.status.json`` after every tick.

    Attributes:
        fpos: Byte offset already consumed in the current log file.
        st_ino: Inode of the active log file when last observed, 0 if unknown.
        last_post_time: Unix timestamp of the last rotation check.
        curr_suffix: Date suffix naming the current day's log file.
    """

    fpos: int = 0
    st_ino: int = 0
    last_post_time: int = 0
    curr_suffix: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the status marker layout."""
        return {
            "curr_suffix": self.curr_suffix,
            "last_post_time": self.last_post_time,
            "fpos": self.fpos,
            "st_ino": self.st_ino,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: StreamStatus | None = None) -> StreamStatus:
        """Build a status from marker data, keeping defaults for unusable fields.

        Args:
            data: Parsed status marker object.
            defaults: Values used for any absent or malformed field.

        Returns:
            New StreamStatus instance.
        """
        base = defaults or cls()
        values: dict[str, Any] = {}
        for f in fields(cls):
            current = getattr(base, f.name)
            raw = data.get(f.name, current)
            if isinstance(current, str):
                values[f.name] = raw if isinstance(raw, str) else current
            elif isinstance(raw, bool) or not isinstance(raw, int):
                # bool is an int subclass, but never a valid offset or inode
                values[f.name] = current
            else:
                values[f.name] = raw

        status = cls(**values)
        if status.fpos < 0:
            status.fpos = 0
        return status
