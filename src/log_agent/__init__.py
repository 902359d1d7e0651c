"""Log collection agent: tails local log streams and ships them to a backend."""

from .agent import LogAgent, TickResult
from .config import AgentConfig, load_agent_config
from .logging_manager import LoggingManager, get_stream_logger
from .poster import BatchPoster

__all__ = [
    "AgentConfig",
    "BatchPoster",
    "LogAgent",
    "LoggingManager",
    "TickResult",
    "get_stream_logger",
    "load_agent_config",
]

__version__ = "0.1.0"
