#!/usr/bin/env python3
"""
Main entry point for the trirk chat client
"""

import argparse
import asyncio
import logging
import sys

from .config import ConfigError, get_configuration
from .errors.handling import log_error
from .irc import IRCListener
from .logging_config import LoggerConfigurator
from .logs.logger import logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trirk",
        description="Connect to a Twitch chat channel and log its events.",
    )
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="validate configuration and exit",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="path to a .env file (default: ./.env)",
    )
    return parser


def health_check(env_file: str | None = None) -> int:
    try:
        config = get_configuration(env_file)
    except ConfigError as e:
        logger.log_event("app", "health_check_failed", level=logging.ERROR, error=str(e))
        return 1
    logger.log_event("app", "health_check_passed", channel_name=config.channel)
    return 0


async def main(env_file: str | None = None) -> None:
    """Load configuration and listen until interrupted.

    Raises:
        SystemExit: If the configuration is invalid or reconnecting gives up.
    """
    logger.log_event("app", "start")
    listener: IRCListener | None = None
    try:
        config = get_configuration(env_file)
        listener = IRCListener(config)
        await listener.listen()
    except asyncio.CancelledError:
        raise
    except ConfigError as e:
        logger.log_event("config", "invalid", level=logging.ERROR, error=str(e))
        sys.exit(1)
    except Exception as e:
        log_error("Main application error", e)
        sys.exit(1)
    finally:
        if listener is not None:
            await listener.stop()
        logger.log_event("app", "shutdown")


def run(argv: list[str] | None = None) -> None:
    """Synchronous entry point for the application.

    Raises:
        SystemExit: If a critical error occurs during execution.
    """
    args = build_parser().parse_args(argv)
    LoggerConfigurator().configure()
    if args.health_check:
        sys.exit(health_check(args.env_file))
    try:
        asyncio.run(main(args.env_file))
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.log_event("app", "interrupted", level=logging.WARNING)
        sys.exit(0)


if __name__ == "__main__":
    run()
