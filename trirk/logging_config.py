"""
Logging setup and failure accounting for the trirk chat client.

``LoggerConfigurator`` installs a colorlog handler on the root logger.
``ClientStats`` tallies failures per category (framing, transport, decoding,
internal, unknown) together with the listener's reconnects and skipped
lines; ``log_structured_error`` feeds it and flags bursts.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any

import colorlog

from .logs.logger import logger

# Failures of one category within BURST_WINDOW seconds that count as a burst
BURST_THRESHOLD = 20
BURST_WINDOW = 60.0


@dataclass
class CategoryStats:
    count: int = 0
    last_message: str = ""
    last_context: dict[str, Any] = field(default_factory=dict)
    recent: deque[float] = field(default_factory=deque)


class ClientStats:
    """Counters describing how rough the current run has been.

    The listener reports every reconnect and every skipped line; failures
    logged through ``log_structured_error`` are tallied per category. A
    category that fails ``burst_threshold`` times inside ``burst_window``
    seconds is reported as bursting, once per window.
    """

    def __init__(
        self, burst_threshold: int = BURST_THRESHOLD, burst_window: float = BURST_WINDOW
    ):
        self.burst_threshold = burst_threshold
        self.burst_window = burst_window
        self.lock = threading.Lock()
        self.clear()

    def clear(self) -> None:
        with self.lock:
            self.categories: dict[str, CategoryStats] = defaultdict(CategoryStats)
            self.reconnects = 0
            self.skipped_lines = 0
            self._last_burst: dict[str, float] = {}

    def record_error(
        self, category: str, message: str, context: dict[str, Any] | None = None
    ) -> bool:
        """Tally one failure; returns True when it starts a burst."""
        now = time.monotonic()
        with self.lock:
            stats = self.categories[category]
            stats.count += 1
            stats.last_message = message
            stats.last_context = dict(context or {})
            stats.recent.append(now)
            while stats.recent and now - stats.recent[0] > self.burst_window:
                stats.recent.popleft()
            if len(stats.recent) < self.burst_threshold:
                return False
            last = self._last_burst.get(category)
            if last is not None and now - last < self.burst_window:
                return False
            self._last_burst[category] = now
            return True

    def record_reconnect(self) -> None:
        with self.lock:
            self.reconnects += 1

    def record_skipped_line(self) -> None:
        with self.lock:
            self.skipped_lines += 1

    def summary(self) -> dict[str, Any]:
        with self.lock:
            return {
                "reconnects": self.reconnects,
                "skipped_lines": self.skipped_lines,
                "errors": {
                    category: {"count": stats.count, "last": stats.last_message}
                    for category, stats in self.categories.items()
                },
            }

    def log_summary_report(self) -> None:
        summary = self.summary()
        if not (summary["errors"] or summary["reconnects"] or summary["skipped_lines"]):
            logger.log_event("app", "stats_clean")
            return
        logger.log_event(
            "app",
            "stats_summary",
            level=logging.WARNING,
            reconnects=summary["reconnects"],
            skipped_lines=summary["skipped_lines"],
        )
        for category, stats in summary["errors"].items():
            logger.log_event(
                "app",
                "stats_category",
                level=logging.WARNING,
                category=category,
                count=stats["count"],
                last=stats["last"],
            )


client_stats = ClientStats()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log an error with structured context and tally it in ``client_stats``.

    Args:
        error_type: Category of the error (e.g., 'transport', 'framing')
        message: Descriptive error message
        exception: The exception that occurred (optional)
        context: Additional context data for debugging
        level: Logging level (default: ERROR)
    """
    structured_message = f"[{error_type.upper()}] {message}"

    if exception:
        structured_message += f" | Exception: {type(exception).__name__}: {str(exception)}"

    if context:
        context_str = " | ".join(f"{k}={v}" for k, v in context.items())
        structured_message += f" | Context: {context_str}"

    logging.log(level, structured_message)

    if client_stats.record_error(error_type, message, context):
        logger.log_event(
            "app",
            "error_burst",
            level=logging.CRITICAL,
            category=error_type,
            count=client_stats.burst_threshold,
            window=client_stats.burst_window,
        )


class LoggerConfigurator:
    """Routes all records through one colorlog handler on the root logger.

    Args:
        debug: Force DEBUG level; ``None`` reads the ``DEBUG`` env var.
        stream: Destination of the handler, stderr by default.
    """

    def __init__(self, debug: bool | None = None, stream=None):
        self.debug = debug
        self.stream = stream

    def _level(self) -> int:
        debug = self.debug
        if debug is None:
            debug = os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")
        return logging.DEBUG if debug else logging.INFO

    def configure(self) -> logging.Handler:
        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "bold_red"}},
            reset=True,
        )
        handler = logging.StreamHandler(self.stream or sys.stderr)
        handler.setFormatter(formatter)

        level = self._level()
        logging.basicConfig(level=level, handlers=[handler], force=True)
        # asyncio is chatty about slow callbacks in debug mode
        logging.getLogger("asyncio").setLevel(logging.INFO)

        atexit.register(client_stats.log_summary_report)
        return handler
