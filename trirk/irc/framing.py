"""Splitting the inbound byte stream into CR LF terminated lines."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import AsyncIterator

from ..constants import LINE_TERMINATOR, MAX_LINE_BYTES, READ_CHUNK_SIZE
from ..errors import (
    ConnectionClosedError,
    IncompleteFrameError,
    LineTooLongError,
    guard_transport,
)

# Stands in for a line dropped for exceeding ``max_line_bytes``
_DROPPED = None


class FrameReader:
    """Carry-over buffer between socket reads.

    The transport gives no framing guarantee: one read may hold several lines
    or a fraction of one. ``feed`` keeps whatever trails the last terminator
    until the next read completes it. One instance belongs to exactly one
    connection and is never shared or reused across reconnects.

    A line longer than ``max_line_bytes`` is not buffered: its bytes are
    discarded up to the next terminator and ``read_line`` reports it once
    with ``LineTooLongError``.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader | None = None,
        chunk_size: int = READ_CHUNK_SIZE,
        max_line_bytes: int = MAX_LINE_BYTES,
    ) -> None:
        self.reader = reader
        self.chunk_size = chunk_size
        self.max_line_bytes = max_line_bytes
        self.buffer = bytearray()
        self._pending: deque[bytes | None] = deque()
        self._discarding = False
        self.dropped_lines = 0
        self.eof = False

    def _split(self, data: bytes) -> list[bytes | None]:
        self.buffer += data
        items: list[bytes | None] = []
        start = 0
        while True:
            end = self.buffer.find(LINE_TERMINATOR, start)
            if end == -1:
                break
            line = bytes(self.buffer[start:end])
            start = end + len(LINE_TERMINATOR)
            if self._discarding:
                # tail of a line already reported as dropped
                self._discarding = False
            elif len(line) > self.max_line_bytes:
                self.dropped_lines += 1
                items.append(_DROPPED)
            else:
                items.append(line)
        if start:
            del self.buffer[:start]
        # a trailing CR may be the first half of the terminator
        keep = 1 if self.buffer.endswith(b"\r") else 0
        if len(self.buffer) - keep > self.max_line_bytes:
            if not self._discarding:
                self._discarding = True
                self.dropped_lines += 1
                items.append(_DROPPED)
            del self.buffer[: len(self.buffer) - keep]
        return items

    def feed(self, data: bytes) -> list[bytes]:
        """Append ``data`` and return every line it completed, terminators removed.

        Over-long lines are left out; ``dropped_lines`` counts them.
        """
        return [line for line in self._split(data) if line is not _DROPPED]

    def finish(self) -> None:
        """Signal that the peer closed the stream.

        Raises:
            IncompleteFrameError: Unterminated bytes were still buffered.
            ConnectionClosedError: Clean end of stream.
        """
        self.eof = True
        if self.buffer:
            pending = bytes(self.buffer)
            self.buffer.clear()
            raise IncompleteFrameError(pending)
        raise ConnectionClosedError("connection closed by peer")

    async def read_line(self) -> bytes:
        """Return the next complete line, reading from the stream as needed.

        Raises:
            LineTooLongError: The next line was dropped for its length.
        """
        while not self._pending:
            if self.eof or self.reader is None:
                raise ConnectionClosedError("stream is closed")
            data = await guard_transport(
                lambda: self.reader.read(self.chunk_size), "read"
            )
            if not data:
                self.finish()
            self._pending.extend(self._split(data))
        line = self._pending.popleft()
        if line is _DROPPED:
            raise LineTooLongError(self.max_line_bytes)
        return line

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_lines()

    async def _iter_lines(self) -> AsyncIterator[bytes]:
        while True:
            try:
                yield await self.read_line()
            except ConnectionClosedError:
                return


__all__ = ["FrameReader"]
