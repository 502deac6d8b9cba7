"""Error taxonomy and error logging helpers."""

from .handling import classify_error, guard_transport, log_error  # noqa: F401
from .internal import (  # noqa: F401
    ConnectionClosedError,
    DecodingError,
    ErrorKind,
    FramingError,
    IncompleteFrameError,
    LineTooLongError,
    TransportError,
    TrirkError,
    UnrecognizedLineError,
)

__all__ = [
    "ErrorKind",
    "TrirkError",
    "FramingError",
    "UnrecognizedLineError",
    "IncompleteFrameError",
    "LineTooLongError",
    "TransportError",
    "ConnectionClosedError",
    "DecodingError",
    "classify_error",
    "guard_transport",
    "log_error",
]
