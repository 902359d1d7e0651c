"""Small file system primitives used by the collector.

``write_str_to_file`` replaces the target through a temporary sibling and an
atomic rename, the same write-then-replace approach used for position state,
so readers never observe a half-written file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)


def get_entire_file_content(path: str | Path) -> str | None:
    """Read a whole file as UTF-8, returning None if it cannot be read."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None


def write_str_to_file(path: str | Path, content: str, mode: int = 0o666) -> None:
    """Fully replace ``path`` with ``content``.

    The data is written to a temporary file in the same directory, flushed to
    disk and renamed over the target. The temporary file is removed if any
    step fails.

    Args:
        path: Destination file.
        content: Text to write (UTF-8).
        mode: Permission bits of the final file, applied as given.

    Raises:
        OSError: If the directory cannot be created or the write fails.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f"{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        # mkstemp always creates 0600
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def scandir(
    path: str | Path,
    predicate: Callable[[str], bool],
    recursive: bool = False,
) -> list[str]:
    """List regular files under ``path`` whose name satisfies ``predicate``.

    Args:
        path: Directory to scan.
        predicate: Called with the bare file name.
        recursive: Descend into sub-directories.

    Returns:
        Full paths of matching files, sorted. Empty if ``path`` is missing.
    """
    matches: list[str] = []
    try:
        entries = list(os.scandir(path))
    except OSError as e:
        logger.debug(f"Cannot scan {path}: {e}")
        return matches

    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                if recursive:
                    matches.extend(scandir(entry.path, predicate, recursive=True))
            elif entry.is_file() and predicate(entry.name):
                matches.append(entry.path)
        except OSError:
            continue

    return sorted(matches)
