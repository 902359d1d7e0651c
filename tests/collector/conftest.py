"""Shared fixtures for collector tests."""

from pathlib import Path

import pytest

from log_agent.collector.models import StreamConfig
from log_agent.collector.stream import LogStream
from log_agent.config import AgentConfig

# 2023-03-01 12:00:00 UTC
NOW = 1677672000
DAY = 24 * 60 * 60

QUALIFIED = '{"app_id":"T1","rasp_id":"A1","msg":"%s"}'
NOISE = '{"app_id":"T2","rasp_id":"A1","msg":"%s"}'


class FakeClock:
    """Settable replacement for time.time."""

    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def agent_config(tmp_path: Path) -> AgentConfig:
    """Agent configuration rooted in a temporary directory, UTC day boundaries."""
    return AgentConfig(
        root_dir=str(tmp_path / "rasp"),
        backend_url="http://backend.test",
        app_id="T1",
        rasp_id="A1",
        max_post_logs_account=128,
        log_suffix_format="%Y%m%d",
        time_offset=0,
        streams=[StreamConfig(name="alarm", url_path="/v1/agent/log/attack")],
    )


@pytest.fixture
def stream_config() -> StreamConfig:
    return StreamConfig(name="alarm", url_path="/v1/agent/log/attack")


@pytest.fixture
def stream_dir(agent_config: AgentConfig) -> Path:
    """Stream log directory, created."""
    path = Path(agent_config.root_dir) / "logs" / "alarm"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def log_stream(agent_config: AgentConfig, stream_config: StreamConfig, stream_dir: Path, clock: FakeClock):
    """LogStream positioned on today's file (suffix 20230301)."""
    stream = LogStream(stream_config, agent_config, clock=clock)
    stream.status.curr_suffix = "20230301"
    yield stream
    stream.close()


def write_lines(path: Path, *lines: str, newline: bool = True) -> None:
    """Append lines to a log file, each newline terminated unless ``newline`` is False."""
    with path.open("ab") as f:
        for i, line in enumerate(lines):
            f.write(line.encode("utf-8"))
            if newline or i < len(lines) - 1:
                f.write(b"\n")
