"""Centralized error hierarchy for the chat client.

Every failure the core reports is a ``TrirkError`` carrying a ``kind`` so a
caller can branch on the category without matching concrete classes.

Classes:
  TrirkError             – Base for all client errors.
  FramingError           – Structural violation of the line shape.
  UnrecognizedLineError  – Line whose leading token matches no known shape.
  IncompleteFrameError   – Peer closed the stream in the middle of a line.
  LineTooLongError       – Line longer than the frame buffer accepts.
  TransportError         – Underlying I/O failure (connect, read, write).
  ConnectionClosedError  – End of stream, or use of a closed connection.
  DecodingError          – Bytes that are not valid UTF-8.

Malformed tag, badge and emote sub-fields never raise; the decoder skips them.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum


class ErrorKind(Enum):
    FRAMING = "framing"
    TRANSPORT = "transport"
    DECODING = "decoding"


class TrirkError(Exception):
    """Base class for all client errors with metadata support.

    Attributes:
        kind: Category of the failure.
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    kind: ErrorKind
    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}

    def __str__(self) -> str:
        return f"{self.kind.name} - {self.args[0] if self.args else ''}"


class FramingError(TrirkError):
    """Raised when a line breaks the protocol's structural grammar.

    Empty lines, a tag block or source prefix with no following space, and
    lines of an unknown shape all land here. Fatal to the line; the caller
    decides whether it is fatal to the connection.
    """

    kind = ErrorKind.FRAMING


class UnrecognizedLineError(FramingError):
    """Raised for a line that matches none of the known shapes."""

    def __init__(self, line: str) -> None:
        leading = line[:1]
        super().__init__(
            f"could not parse message '{line}' with start char '{leading}'",
            data={"leading_char": leading, "line": line},
        )

    @property
    def line(self) -> str:
        return str(self.data["line"])

    @property
    def leading_char(self) -> str:
        return str(self.data["leading_char"])


class IncompleteFrameError(FramingError):
    """Raised when the peer closes the stream while a line is still buffered."""

    def __init__(self, pending: bytes) -> None:
        super().__init__(
            "connection closed mid-message",
            data={"pending_bytes": len(pending), "pending": bytes(pending)},
        )


class LineTooLongError(FramingError):
    """Raised once for a line that outgrew the frame buffer limit.

    The offending bytes are discarded up to the next terminator; later lines
    on the same connection are unaffected.
    """

    def __init__(self, limit: int) -> None:
        super().__init__(f"line exceeds {limit} bytes", data={"limit": limit})


class TransportError(TrirkError):
    """Raised for connect, read or write failures on the socket.

    The originating ``OSError`` is chained as ``__cause__``. Never retried
    inside the core.
    """

    kind = ErrorKind.TRANSPORT


class ConnectionClosedError(TransportError):
    """Raised on end of stream, or when a closed connection is used."""


class DecodingError(TrirkError):
    """Raised when a received line is not valid UTF-8."""

    kind = ErrorKind.DECODING


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
]
