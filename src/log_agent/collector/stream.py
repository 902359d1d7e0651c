"""Incremental, identity-aware tailing of one daily rotated log stream.

A ``LogStream`` tracks how much of the current day's log file has been
consumed, follows the file across rotations by inode, extracts the lines that
belong to this agent and keeps its progress in a status marker so collection
resumes where it left off after a restart.

Offsets move in two phases. Extraction advances a provisional cursor
(``pending_fpos``); the committed offset (``fpos``) only follows it when
``update_fpos`` is called after the batch was delivered. The one exception is
leading noise: lines that do not qualify and precede every qualifying line of
a pass are skipped eagerly by moving ``fpos`` directly.
"""

from __future__ import annotations

import os
import stat
import time
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from ..logging_manager import get_stream_logger
from .models import StreamConfig, StreamStatus
from .qualifier import log_content_qualified
from .retention import cleanup_expired_logs
from .status_store import StatusStore
from .timeutil import format_time, same_day

if TYPE_CHECKING:
    from ..config import AgentConfig


class LogStream:
    """Reading state and batch extraction for a single log stream.

    Attributes:
        name: Stream identifier.
        url_path: Backend endpoint suffix for this stream.
        collect_enable: Whether lines are extracted at all.
        base_dir: ``<root>/logs/<name>`` directory of the stream.
        status: Persisted progress (offset, inode, suffix, last post time).
        pending_fpos: Provisional offset reached by the last extraction pass.
        last_batch_count: Number of lines in the last extracted batch.
    """

    def __init__(
        self,
        stream: StreamConfig,
        config: AgentConfig,
        clock: Callable[[], float] = time.time,
        status_store: StatusStore | None = None,
    ):
        """Initialize the stream and load its status marker.

        Args:
            stream: Name, endpoint and enable flag of the stream.
            config: Agent configuration (root dir, identity, limits).
            clock: Source of the current Unix time.
            status_store: Marker store, defaults to the stream's own directory.
        """
        self.name = stream.name
        self.url_path = stream.url_path
        self.collect_enable = stream.collect_enable
        self.config = config
        self._clock = clock
        self._time_offset = config.effective_time_offset()
        self._handle: BinaryIO | None = None
        self.logger = get_stream_logger(self.name, __name__)

        self.base_dir = Path(config.root_dir) / "logs" / self.name
        self.status_store = status_store or StatusStore(self.base_dir)
        self.status = self.status_store.load(StreamStatus())
        self.pending_fpos = self.status.fpos
        self.last_batch_count = 0

    def __enter__(self) -> LogStream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"LogStream(name={self.name!r}, suffix={self.status.curr_suffix!r}, "
            f"fpos={self.status.fpos}, st_ino={self.status.st_ino})"
        )

    # Tailing reader

    def active_log_path(self) -> Path:
        """Path of the log file for the current suffix."""
        return self.base_dir / f"{self.name}.log.{self.status.curr_suffix}"

    def open_active_log(self) -> None:
        """Open the active log file for reading if no handle is open.

        A missing file is not an error; the next call tries again.
        """
        if self._handle is not None:
            return
        try:
            self._handle = open(self.active_log_path(), "rb")
        except FileNotFoundError:
            self.logger.debug(f"Active log {self.active_log_path()} does not exist yet")
        except OSError as e:
            self.logger.warning(f"Cannot open active log {self.active_log_path()}: {e}")

    def active_file_inode(self) -> int:
        """Inode of the active log file, or 0 if it is not a regular file."""
        try:
            sb = os.stat(self.active_log_path())
        except OSError:
            return 0
        if not stat.S_ISREG(sb.st_mode):
            return 0
        return sb.st_ino

    def determine_fpos(self) -> None:
        """Position the read handle at the committed offset.

        If the file on disk is a different one than last observed (rotated or
        recreated by the writer), the old offset is meaningless and reading
        restarts at 0. A failed seek is ignored; the pass then reads nothing.
        """
        self.open_active_log()

        curr_st_ino = self.active_file_inode()
        if curr_st_ino != 0 and curr_st_ino != self.status.st_ino:
            self.logger.info(
                f"Log file identity changed ({self.status.st_ino} -> {curr_st_ino}), "
                f"resetting offset {self.status.fpos} -> 0"
            )
            self.status.st_ino = curr_st_ino
            self.status.fpos = 0
            if self._handle is not None and os.fstat(self._handle.fileno()).st_ino != curr_st_ino:
                # handle still refers to the replaced file
                self.close()
                self.open_active_log()

        self.pending_fpos = self.status.fpos
        if self._handle is None:
            return
        try:
            self._handle.seek(self.status.fpos)
        except (OSError, ValueError) as e:
            self.logger.debug(f"Seek to {self.status.fpos} failed: {e}")

    def close(self) -> None:
        """Release the read handle."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    # Qualifying batcher

    def get_post_logs(self) -> tuple[bytes, bool]:
        """Collect qualifying lines from the current position.

        Reads complete lines until ``max_post_logs_account`` lines qualified or
        no complete line is left. A trailing line without a newline is left
        for a later pass.

        Returns:
            Tuple of (payload, has_data). The payload is a JSON array of the
            qualifying lines as read from the file, or empty bytes when
            nothing qualified.
        """
        self.last_batch_count = 0
        if not self.collect_enable or self._handle is None:
            return b"", False

        app_id = self.config.app_id
        rasp_id = self.config.rasp_id
        max_lines = self.config.max_post_logs_account

        lines: list[bytes] = []
        qualified_log_found = False
        while len(lines) < max_lines:
            line_start = self._handle.tell()
            raw = self._handle.readline()
            if not raw:
                break
            if not raw.endswith(b"\n"):
                self._handle.seek(line_start)
                break

            line_end = self._handle.tell()
            content = raw.rstrip(b"\r\n")

            if log_content_qualified(content, app_id, rasp_id):
                qualified_log_found = True
                lines.append(content)
                self.pending_fpos = line_end
            elif not qualified_log_found:
                self.status.fpos = line_end
                self.pending_fpos = line_end
            # noise after qualifying content keeps both offsets where they are

        if not lines:
            return b"", False

        self.last_batch_count = len(lines)
        self.logger.debug(
            f"Collected {len(lines)} line(s), offset {self.status.fpos} -> {self.pending_fpos}"
        )
        return b"[" + b",".join(lines) + b"]", True

    def update_fpos(self) -> None:
        """Commit the provisional offset after a successful delivery."""
        self.status.fpos = self.pending_fpos

    # Stream state tracker

    def need_rotate(self) -> bool:
        """True when now and the last post time fall on different days."""
        return not same_day(self._clock(), self.status.last_post_time, self._time_offset)

    def update_last_post_time(self) -> None:
        self.status.last_post_time = int(self._clock())

    def handle_rotate(self, need_rotate: bool) -> None:
        """Record the check time and, on a new day, sweep and switch files."""
        now = self._clock()
        self.status.last_post_time = int(now)
        if need_rotate:
            cleanup_expired_logs(self.name, self.base_dir, self.config, now)
            self.clear(now)

    def clear(self, now: float | None = None) -> None:
        """Reset the in-memory state for the day containing ``now``."""
        if now is None:
            now = self._clock()
        previous = self.status.curr_suffix
        self.status.curr_suffix = format_time(self.config.log_suffix_format, now, self._time_offset)
        self.close()
        self.status.fpos = 0
        self.status.st_ino = 0
        self.pending_fpos = 0
        self.logger.info(f"Rotated from suffix {previous!r} to {self.status.curr_suffix!r}")

    def save_status_snapshot(self) -> None:
        """Persist the status marker.

        Raises:
            StatusPersistError: If the marker could not be written.
        """
        self.status_store.save(self.status)

    def complete_url(self) -> str:
        """Full backend URL for this stream's batches."""
        base = self.config.backend_url
        if base.endswith("/") and self.url_path.startswith("/"):
            base = base[:-1]
        return base + self.url_path
