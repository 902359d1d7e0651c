"""
LogAgent - Periodic collection and delivery of local log streams.

Every tick walks all configured streams in order. For each stream it checks
whether the day changed, extracts the new qualifying lines, posts them, and
persists the stream status. A failure in one stream never stops the others.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from .collector.errors import PostError, StatusPersistError
from .collector.stream import LogStream
from .config import AgentConfig
from .poster import BatchPoster

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Outcome of one tick for one stream."""

    stream: str
    posted_lines: int = 0
    rotated: bool = False
    error: str | None = None


class LogAgent:
    """Drives collection for all configured log streams."""

    def __init__(
        self,
        config: AgentConfig,
        poster: BatchPoster | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the agent.

        Args:
            config: Agent configuration
            poster: Batch poster; built from config if None
            clock: Source of the current Unix time
        """
        self.config = config
        self.poster = poster or BatchPoster(
            app_id=config.app_id,
            app_secret=config.app_secret,
            timeout=config.request_timeout,
        )
        self.streams = [LogStream(stream, config, clock=clock) for stream in config.streams]

        logger.info(
            f"LogAgent initialized with {len(self.streams)} stream(s): "
            f"{', '.join(s.name for s in self.streams)}"
        )

    def tick(self) -> list[TickResult]:
        """Run one collection pass over every stream."""
        return [self._tick_stream(stream) for stream in self.streams]

    def _tick_stream(self, stream: LogStream) -> TickResult:
        result = TickResult(stream=stream.name)
        try:
            file_rotate = stream.need_rotate()
            stream.determine_fpos()

            body, has_data = stream.get_post_logs()
            if has_data:
                try:
                    self.poster.post(stream.complete_url(), body)
                except PostError as e:
                    stream.logger.warning(f"Batch of {stream.last_batch_count} line(s) not delivered: {e}")
                    result.error = str(e)
                else:
                    stream.update_fpos()
                    result.posted_lines = stream.last_batch_count
                    stream.logger.info(f"Posted {stream.last_batch_count} line(s)")

            stream.handle_rotate(file_rotate)
            result.rotated = file_rotate
            stream.save_status_snapshot()

        except StatusPersistError as e:
            stream.logger.error(f"Progress not saved: {e}")
            result.error = str(e)
        except Exception as e:
            stream.logger.error(f"Tick failed: {e}", exc_info=True)
            result.error = f"{type(e).__name__}: {e}"

        return result

    def run(self, stop_event: threading.Event) -> None:
        """Tick until ``stop_event`` is set."""
        logger.info(f"Collection loop started (interval: {self.config.tick_interval}s)")

        while not stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                logger.critical(f"Critical error in collection loop: {e}", exc_info=True)
            stop_event.wait(self.config.tick_interval)

        logger.info("Collection loop exited")

    def close(self) -> None:
        """Release stream handles and the HTTP client."""
        for stream in self.streams:
            stream.close()
        self.poster.close()
