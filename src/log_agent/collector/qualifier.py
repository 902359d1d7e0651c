"""Decide whether a log line belongs to this agent.

Lines are JSON objects written by the local logger. A line is shipped only
when it carries both the configured application id and this agent's id.
Matching works on raw bytes as read from the file, or on text.
"""

from __future__ import annotations

APP_ID_KEY = "app_id"
RASP_ID_KEY = "rasp_id"


def build_marker(key: str, value: str) -> str:
    """Return the quoted key/value fragment searched for in a line."""
    return f'"{key}":"{value}"'


def log_content_qualified(content: str | bytes, app_id: str | None, rasp_id: str | None) -> bool:
    """Check a single log line against the agent identity.

    Args:
        content: The line, without its terminator.
        app_id: Configured application id, or None when not configured.
        rasp_id: This agent's instance id, or None when not known.

    Returns:
        True only if the line is non-empty and contains both markers.
    """
    if not content:
        return False
    if not app_id or not rasp_id:
        return False

    app_marker = build_marker(APP_ID_KEY, app_id)
    rasp_marker = build_marker(RASP_ID_KEY, rasp_id)
    if isinstance(content, bytes):
        return app_marker.encode("utf-8") in content and rasp_marker.encode("utf-8") in content
    return app_marker in content and rasp_marker in content
