from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ..logging_config import log_structured_error
from .internal import (
    ConnectionClosedError,
    DecodingError,
    FramingError,
    TransportError,
    TrirkError,
)

T = TypeVar("T")


def classify_error(error: BaseException) -> str:
    """Return the aggregation category for an exception."""
    if isinstance(error, FramingError):
        return "framing"
    if isinstance(error, TransportError | OSError | ConnectionError | TimeoutError):
        return "transport"
    if isinstance(error, DecodingError | UnicodeDecodeError):
        return "decoding"
    if isinstance(error, TrirkError):
        return "internal"
    return "unknown"


def log_error(
    message: str,
    error: Exception,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Logs an error message with the associated exception details.

    The error is classified into one of the client's categories and forwarded
    to structured logging so repeated failures are aggregated.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
        level: Logging level, ERROR unless the caller treats it as noise.
    """
    merged = dict(context or {})
    if isinstance(error, TrirkError):
        # Raw payloads stay out of log lines
        merged.update({k: v for k, v in error.data.items() if k != "pending"})
    log_structured_error(
        error_type=classify_error(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=merged or None,
        level=level,
    )


async def guard_transport(
    operation: Callable[[], Awaitable[T]], context: str
) -> T:
    """Run a socket operation, translating I/O failures into ``TransportError``.

    Args:
        operation: The async I/O operation to execute.
        context: Descriptive context for the operation (e.g., "handshake write").

    Returns:
        The result of the operation if successful.

    Raises:
        ConnectionClosedError: If the peer reset or the stream was already closed.
        TransportError: For any other OS level failure or timeout.
    """
    try:
        return await operation()
    except TrirkError:
        raise
    except (ConnectionResetError, BrokenPipeError, asyncio.IncompleteReadError) as e:
        raise ConnectionClosedError(
            f"Connection closed during {context}: {str(e)}",
            data={"operation": context, "timestamp": time.time()},
        ) from e
    except (OSError, TimeoutError) as e:
        raise TransportError(
            f"I/O failure during {context}: {type(e).__name__}: {str(e)}",
            data={"operation": context, "timestamp": time.time()},
        ) from e
