"""Structured logging for the log agent.

Provides console and rotating JSON file output for the ``log_agent`` logger
hierarchy, plus an adapter that tags records with the stream they concern.
"""

import json
import logging
import logging.handlers
from pathlib import Path

# Attributes every LogRecord has; anything else was passed through ``extra``
_RECORD_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "asctime",
        "taskName",
        "extras",
    ]
)


class StreamLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds stream context to all log messages."""

    def process(self, msg, kwargs):
        """Add the stream name to the record and prefix the message."""
        extra = kwargs.get("extra", {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return f"[{self.extra['stream']}] {msg}", kwargs


class JsonExtraFilter(logging.Filter):
    """Render ``extra`` fields of a record as a JSON fragment."""

    def filter(self, record):
        extras = {}
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS:
                continue
            try:
                json.dumps(value)  # Ensure serializable
                extras[key] = value
            except (TypeError, ValueError):
                extras[key] = str(value)

        if extras:
            record.extras = ", " + ", ".join(f'"{k}": {json.dumps(v)}' for k, v in extras.items())
        else:
            record.extras = ""
        return True


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record):
        record.message = record.getMessage()
        log_obj = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        line = json.dumps(log_obj)
        extras = getattr(record, "extras", "")
        if extras:
            line = line[:-1] + extras + "}"
        return line


class LoggingManager:
    """Configures logging for the agent process."""

    LOGGER_NAME = "log_agent"

    def __init__(self, log_dir: str | Path | None = None, log_level: str = "INFO"):
        """Initialize logging manager.

        Args:
            log_dir: Directory for the agent log file, None for console only
            log_level: Console log level
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_level = getattr(logging, log_level.upper(), logging.INFO)
        self.log_file: Path | None = None

        logger = logging.getLogger(self.LOGGER_NAME)
        logger.setLevel(logging.DEBUG)  # Let handlers filter
        logger.propagate = False
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        # Console handler - human readable
        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(console_handler)

        # File handler - structured JSON
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.log_dir / "agent.log"
            file_handler = logging.handlers.RotatingFileHandler(
                self.log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
            )
            file_handler.setLevel(logging.DEBUG)  # Capture everything to file
            file_handler.addFilter(JsonExtraFilter())
            file_handler.setFormatter(JsonLineFormatter())
            logger.addHandler(file_handler)

        self.logger = logger

    def shutdown(self) -> None:
        """Flush and detach all handlers."""
        for handler in list(self.logger.handlers):
            handler.flush()
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.propagate = True


def get_stream_logger(stream_name: str, name: str = "log_agent.stream") -> StreamLoggerAdapter:
    """Get a logger adapter tagging records with ``stream_name``."""
    return StreamLoggerAdapter(logging.getLogger(name), {"stream": stream_name})
