"""Deletion of rotated log files older than the backup horizon."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from .fsutil import scandir
from .timeutil import SECONDS_PER_DAY, format_time

if TYPE_CHECKING:
    from ..config import AgentConfig

logger = logging.getLogger(__name__)


def expired_suffix(now: float, retention_days: int, suffix_format: str, time_offset: int) -> str:
    """Date suffix of the oldest day that is still kept."""
    return format_time(suffix_format, now - retention_days * SECONDS_PER_DAY, time_offset)


def cleanup_expired_logs(
    stream_name: str,
    base_dir: str | Path,
    config: AgentConfig,
    now: float,
) -> list[str]:
    """Remove ``<stream_name>.log.<suffix>`` files older than the retention window.

    Suffixes are fixed-width dates, so comparing file names as strings orders
    them chronologically. Files that cannot be deleted are skipped.

    Args:
        stream_name: Stream whose files are swept.
        base_dir: Directory holding the stream's log files.
        config: Agent configuration providing retention and suffix format.
        now: Current Unix time.

    Returns:
        Paths that were deleted.
    """
    retention_days = config.effective_log_max_backup()
    prefix = f"{stream_name}.log."
    cutoff = prefix + expired_suffix(
        now, retention_days, config.log_suffix_format, config.effective_time_offset()
    )

    candidates = scandir(
        base_dir,
        lambda filename: filename.startswith(prefix) and filename < cutoff,
        recursive=False,
    )

    deleted: list[str] = []
    for path in candidates:
        try:
            os.unlink(path)
        except OSError as e:
            logger.warning(f"Failed to delete expired log {path}: {e}")
            continue
        deleted.append(path)

    if deleted:
        logger.info(
            f"Removed {len(deleted)} expired {stream_name} log(s) older than {cutoff}"
        )
    return deleted
