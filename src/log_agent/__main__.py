"""Log agent entry point.

Usage: python -m log_agent [--config PATH] [--once] [--log-level LEVEL]

Tails the local RASP log streams and ships this agent's records to the
management backend. Configuration is read from the YAML file given with
``--config``; these environment variables override it:
    LOG_AGENT_ROOT_DIR     - Install root holding logs/<stream>/
    LOG_AGENT_BACKEND_URL  - Backend base URL
    LOG_AGENT_APP_ID       - Application id
    LOG_AGENT_APP_SECRET   - Application secret
    LOG_AGENT_RASP_ID      - This agent's id
    LOG_AGENT_LOG_LEVEL    - Console log level (default: INFO)
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

from .agent import LogAgent
from .collector.errors import ConfigError
from .config import load_agent_config
from .logging_manager import LoggingManager

logger = logging.getLogger("log_agent")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="log-agent", description="Ship local RASP logs to the backend")
    parser.add_argument("--config", help="path to the YAML configuration file")
    parser.add_argument("--once", action="store_true", help="run a single tick and exit")
    parser.add_argument("--log-level", help="override the configured log level")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_agent_config(args.config)
    except (FileNotFoundError, ConfigError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if args.log_level:
        config.log_level = args.log_level
    logging_manager = LoggingManager(log_dir=config.log_dir, log_level=config.log_level)

    errors = config.validate()
    if errors:
        for err in errors:
            logger.error("Config error: %s", err)
        logging_manager.shutdown()
        return 1

    logger.info("Starting log agent for app_id=%s rasp_id=%s", config.app_id, config.rasp_id)
    logger.info("Collecting from: %s/logs", config.root_dir)
    logger.info("Posting to: %s", config.backend_url)

    agent = LogAgent(config)
    stop_event = threading.Event()

    def shutdown(sig, frame):
        logger.info("Shutting down...")
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        if args.once:
            results = agent.tick()
            failed = [r for r in results if r.error]
            for r in results:
                logger.info(
                    "%s: posted=%d rotated=%s error=%s", r.stream, r.posted_lines, r.rotated, r.error
                )
            return 1 if failed else 0

        agent.run(stop_event)
        return 0
    finally:
        agent.close()
        logger.info("Agent stopped.")
        logging_manager.shutdown()


if __name__ == "__main__":
    sys.exit(main())
