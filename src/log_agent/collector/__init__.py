"""Log collection core.

This package tracks reading progress of daily rotated log streams and turns
newly written lines into batches ready to be posted to the backend.

Key Components:
    - models: Stream configuration and persisted stream status
    - status_store: Status marker load/save
    - stream: Tailing, qualification-based batching and rotation handling
    - retention: Cleanup of expired rotated log files

Example:
    >>> from log_agent.collector import LogStream, StreamConfig
    >>> from log_agent.config import AgentConfig
    >>> config = AgentConfig(root_dir="/opt/rasp", app_id="app", rasp_id="agent")
    >>> stream = LogStream(StreamConfig("alarm", "/v1/agent/log/attack"), config)
    >>> stream.determine_fpos()
    >>> body, has_data = stream.get_post_logs()
"""

from __future__ import annotations

from .errors import ConfigError, LogCollectError, PostError, StatusPersistError
from .models import StreamConfig, StreamStatus
from .qualifier import log_content_qualified
from .retention import cleanup_expired_logs
from .status_store import StatusStore
from .stream import LogStream

__all__ = [
    "ConfigError",
    "LogCollectError",
    "LogStream",
    "PostError",
    "StatusPersistError",
    "StatusStore",
    "StreamConfig",
    "StreamStatus",
    "cleanup_expired_logs",
    "log_content_qualified",
]
