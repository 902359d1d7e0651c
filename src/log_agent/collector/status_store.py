"""Persistence of per-stream reading progress.

Each stream keeps a single JSON status marker next to its log files. Loading
is forgiving: any problem with the marker falls back to a cold start. Saving is
strict: a failed write is reported to the caller, since losing it would cause
already shipped lines to be sent again after a restart.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path

from .errors import StatusPersistError
from .fsutil import get_entire_file_content, write_str_to_file
from .models import StreamStatus

logger = logging.getLogger(__name__)

STATUS_FILE_NAME = ".status.json"


class StatusStore:
    """Loads and saves the status marker of one log stream.

    Attributes:
        status_file: Path of the JSON marker file.
    """

    def __init__(self, base_dir: str | Path):
        """Initialize the store.

        Args:
            base_dir: Stream log directory holding the marker.
        """
        self.status_file = Path(base_dir) / STATUS_FILE_NAME

    def load(self, defaults: StreamStatus | None = None) -> StreamStatus:
        """Read the marker, falling back to ``defaults`` on any problem.

        Args:
            defaults: Pre-load values kept for absent or unusable fields.

        Returns:
            The loaded status. Never raises.
        """
        defaults = defaults or StreamStatus()

        if not self.status_file.exists():
            logger.debug(f"No status marker at {self.status_file}, starting fresh")
            return replace(defaults)

        content = get_entire_file_content(self.status_file)
        if content is None:
            logger.warning(f"Status marker {self.status_file} unreadable, starting fresh")
            return replace(defaults)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse status marker {self.status_file}: {e}, starting fresh")
            return replace(defaults)

        if not isinstance(data, dict):
            logger.warning(f"Status marker {self.status_file} is not a JSON object, starting fresh")
            return replace(defaults)

        status = StreamStatus.from_dict(data, defaults)
        logger.debug(f"Loaded status from {self.status_file}: {status}")
        return status

    def save(self, status: StreamStatus) -> None:
        """Replace the marker with ``status``.

        The marker is written world readable (0666) whatever the umask.

        Raises:
            StatusPersistError: If the marker could not be written.
        """
        content = json.dumps(status.to_dict(), indent=4)

        try:
            write_str_to_file(self.status_file, content, mode=0o666)
        except OSError as e:
            logger.error(f"Failed to save status marker {self.status_file}: {e}")
            raise StatusPersistError(self.status_file, str(e)) from e

        logger.debug(f"Saved status to {self.status_file}: fpos={status.fpos}, st_ino={status.st_ino}")
