"""Agent configuration for the log collector.

Configuration comes from an optional YAML file, then environment variables
override individual values.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .collector.errors import ConfigError
from .collector.models import StreamConfig
from .collector.timeutil import SECONDS_PER_DAY, fetch_time_offset

logger = logging.getLogger(__name__)

DEFAULT_LOG_MAX_BACKUP = 30

# Evaluated once per process, like the writer's own day boundary
LOCAL_TIME_OFFSET = fetch_time_offset()

ENV_OVERRIDES = {
    "LOG_AGENT_ROOT_DIR": "root_dir",
    "LOG_AGENT_BACKEND_URL": "backend_url",
    "LOG_AGENT_APP_ID": "app_id",
    "LOG_AGENT_APP_SECRET": "app_secret",
    "LOG_AGENT_RASP_ID": "rasp_id",
    "LOG_AGENT_LOG_LEVEL": "log_level",
}


def default_streams() -> list[StreamConfig]:
    """Streams written by the local logger."""
    return [
        StreamConfig(name="alarm", url_path="/v1/agent/log/attack"),
        StreamConfig(name="policy", url_path="/v1/agent/log/policy"),
        StreamConfig(name="plugin", url_path="/v1/agent/log/plugin"),
    ]


@dataclass
class AgentConfig:
    """Configuration for the log collection agent.

    Attributes:
        root_dir: Install root; logs live under ``<root_dir>/logs/<stream>``.
        backend_url: Base URL of the management backend.
        app_id: Application id lines must carry to be shipped.
        app_secret: Secret sent alongside the app id.
        rasp_id: This agent's instance id lines must carry to be shipped.
        max_post_logs_account: Maximum qualifying lines posted per stream per tick.
        log_max_backup: Days of rotated logs to keep (30 when not positive).
        log_suffix_format: strftime format of the daily log file suffix.
        time_offset: Seconds east of UTC for day boundaries, None for local time.
        tick_interval: Seconds between collection ticks.
        request_timeout: HTTP timeout in seconds.
        log_level: Level of the agent's own logging.
        log_dir: Directory for the agent's own log file, None for console only.
        streams: Collected log streams.
    """

    root_dir: str = "/tmp/log_agent"
    backend_url: str = ""
    app_id: str | None = None
    app_secret: str | None = None
    rasp_id: str | None = None
    max_post_logs_account: int = 128
    log_max_backup: int = DEFAULT_LOG_MAX_BACKUP
    log_suffix_format: str = "%Y-%m-%d"
    time_offset: int | None = None
    tick_interval: int = 10
    request_timeout: float = 10.0
    log_level: str = "INFO"
    log_dir: str | None = None
    streams: list[StreamConfig] = field(default_factory=default_streams)

    def effective_log_max_backup(self) -> int:
        if self.log_max_backup is None or self.log_max_backup <= 0:
            return DEFAULT_LOG_MAX_BACKUP
        return self.log_max_backup

    def effective_time_offset(self) -> int:
        return LOCAL_TIME_OFFSET if self.time_offset is None else self.time_offset

    def validate(self) -> list[str]:
        """Return list of validation errors, empty if config is valid."""
        errors = []
        if not self.root_dir:
            errors.append("root_dir is required")
        if self.max_post_logs_account <= 0:
            errors.append("max_post_logs_account must be positive")
        if self.tick_interval <= 0:
            errors.append("tick_interval must be positive")
        if not self.backend_url:
            errors.append("backend_url is required")
        if self.time_offset is not None and (
            isinstance(self.time_offset, bool)
            or not isinstance(self.time_offset, int)
            or not -SECONDS_PER_DAY < self.time_offset < SECONDS_PER_DAY
        ):
            errors.append(
                f"time_offset must be an integer strictly between -{SECONDS_PER_DAY} "
                f"and {SECONDS_PER_DAY} seconds: {self.time_offset!r}"
            )

        seen: set[str] = set()
        for stream in self.streams:
            if not stream.name:
                errors.append("stream name must not be empty")
            elif "/" in stream.name or os.sep in stream.name:
                errors.append(f"stream name must not contain a path separator: {stream.name}")
            if stream.name in seen:
                errors.append(f"duplicate stream name: {stream.name}")
            seen.add(stream.name)
        return errors


def _parse_streams(raw: Any) -> list[StreamConfig]:
    if not isinstance(raw, list):
        raise ConfigError("'streams' must be a list")

    streams = []
    for item in raw:
        if not isinstance(item, Mapping) or "name" not in item or "url_path" not in item:
            raise ConfigError(f"Invalid stream entry: {item!r}")
        streams.append(
            StreamConfig(
                name=str(item["name"]),
                url_path=str(item["url_path"]),
                collect_enable=bool(item.get("collect_enable", True)),
            )
        )
    return streams


def load_agent_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AgentConfig:
    """Load agent configuration from a YAML file and the environment.

    Args:
        path: YAML configuration file, None to use defaults only.
        env: Environment mapping, defaults to ``os.environ``.

    Returns:
        Loaded configuration.

    Raises:
        FileNotFoundError: If ``path`` doesn't exist
        ConfigError: If the YAML is invalid or has unknown/invalid keys
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Agent configuration file not found: {config_path}")

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse agent configuration YAML: {e}") from e

        if not isinstance(data, Mapping):
            raise ConfigError(f"Agent configuration must be a mapping: {config_path}")

        known = {f.name for f in fields(AgentConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values.update(data)
        if "streams" in values:
            values["streams"] = _parse_streams(values["streams"])
        logger.debug(f"Loaded agent configuration from {config_path}")

    for var, key in ENV_OVERRIDES.items():
        if env.get(var):
            values[key] = env[var]

    try:
        return AgentConfig(**values)
    except TypeError as e:
        raise ConfigError(f"Invalid agent configuration: {e}") from e
