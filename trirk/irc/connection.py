"""Connection lifecycle: ``ClosedConnection`` -> ``OpenedConnection``.

The two states are separate types. A ``ClosedConnection`` only holds
configuration; the only way to get an ``OpenedConnection`` is ``open()``,
which connects and writes the handshake. Reconnecting means calling
``open()`` again, which builds a fresh ``OpenedConnection`` with its own
frame buffer.
"""

from __future__ import annotations

import asyncio
import logging

from ..config.model import TwitchConfig
from ..constants import ASYNC_IRC_CONNECT_TIMEOUT, IRC_CAPABILITIES, PONG_REPLY
from ..errors import (
    ConnectionClosedError,
    DecodingError,
    IncompleteFrameError,
    TransportError,
    guard_transport,
)
from ..logs.logger import logger
from .framing import FrameReader
from .models import Message
from .parser import parse_message


def _line(text: str) -> bytes:
    return f"{text}\r\n".encode("utf-8")


class ClosedConnection:
    """Configuration for a connection that has not been opened yet."""

    def __init__(
        self, config: TwitchConfig, connect_timeout: float = ASYNC_IRC_CONNECT_TIMEOUT
    ) -> None:
        self.config = config
        self.connect_timeout = connect_timeout

    def handshake(self) -> bytes:
        """Authentication, nickname, join and capability requests as one payload."""
        lines = [
            f"PASS {self.config.oauth}",
            f"NICK {self.config.nickname}",
            f"JOIN #{self.config.channel}",
        ]
        lines.extend(f"CAP REQ :{cap}" for cap in IRC_CAPABILITIES)
        return b"".join(_line(line) for line in lines)

    async def open(self) -> OpenedConnection:
        """Connect and send the handshake.

        Capability acknowledgments are not awaited; the connection is returned
        as soon as the handshake has been written.

        Raises:
            TransportError: Connect, timeout or handshake write failure.
        """
        config = self.config
        logger.log_event(
            "irc",
            "connect_start",
            user=config.nickname,
            channel=config.channel,
            server=config.host,
            port=config.port,
        )
        try:
            reader, writer = await guard_transport(
                lambda: asyncio.wait_for(
                    asyncio.open_connection(config.host, config.port),
                    timeout=self.connect_timeout,
                ),
                "connect",
            )
        except TransportError as e:
            logger.log_event(
                "irc",
                "connect_failed",
                level=logging.ERROR,
                user=config.nickname,
                server=config.host,
                port=config.port,
                error=str(e),
            )
            raise
        logger.log_event(
            "irc", "connection_established", level=logging.DEBUG, user=config.nickname
        )
        connection = OpenedConnection(config, reader, writer)
        try:
            await connection.send(self.handshake())
        except TransportError:
            await connection.close()
            raise
        logger.log_event(
            "irc",
            "auth_sent",
            level=logging.DEBUG,
            user=config.nickname,
            capabilities=len(IRC_CAPABILITIES),
        )
        logger.log_event(
            "irc",
            "state_change",
            level=logging.DEBUG,
            user=config.nickname,
            old_state="closed",
            new_state="opened",
        )
        return connection


class OpenedConnection:
    """Live connection; the sole owner of its socket.

    Reads are serialized by one lock and writes by another, so a read for the
    next line never interleaves with another read and every write is fully
    drained before the next one starts.
    """

    def __init__(
        self,
        config: TwitchConfig,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        self.config = config
        self._reader = reader
        self._writer = writer
        self._frames = FrameReader(reader)
        self._read_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def channel(self) -> str:
        return self.config.channel

    def _ensure_open(self) -> None:
        if self._closed:
            raise ConnectionClosedError("connection is closed")

    async def send(self, data: bytes) -> None:
        """Write raw bytes and wait until they are flushed."""
        self._ensure_open()

        async def _write() -> None:
            self._writer.write(data)
            await self._writer.drain()

        async with self._write_lock:
            await guard_transport(_write, "write")
        logger.log_event(
            "irc", "send", level=logging.DEBUG, user=self.config.nickname, size=len(data)
        )

    async def privmsg(self, text: str) -> None:
        """Send a chat message to the configured channel.

        Raises:
            ValueError: ``text`` contains a line break.
        """
        if "\r" in text or "\n" in text:
            raise ValueError("chat message must not contain line breaks")
        await self.send(_line(f"PRIVMSG #{self.config.channel} :{text}"))
        logger.log_event(
            "irc",
            "privmsg_sent",
            level=logging.DEBUG,
            user=self.config.nickname,
            channel=self.config.channel,
            length=len(text),
        )

    async def pong(self) -> None:
        """Answer a server ``PING``."""
        await self.send(_line(PONG_REPLY))
        logger.log_event("irc", "pong_sent", level=logging.DEBUG, user=self.config.nickname)

    async def read_next(self) -> Message:
        """Wait for the next complete line and parse it.

        Raises:
            ConnectionClosedError: End of stream, or the connection was closed.
            IncompleteFrameError: The peer closed the stream mid-line.
            TransportError: The read failed.
            DecodingError: The line is not valid UTF-8.
            FramingError: The line is structurally malformed.
        """
        self._ensure_open()
        async with self._read_lock:
            try:
                raw = await self._frames.read_line()
            except IncompleteFrameError as e:
                logger.log_event(
                    "irc",
                    "incomplete_frame",
                    level=logging.WARNING,
                    user=self.config.nickname,
                    pending_bytes=e.data.get("pending_bytes", 0),
                )
                raise
            except ConnectionClosedError:
                if not self._closed:
                    logger.log_event(
                        "irc",
                        "connection_lost",
                        level=logging.WARNING,
                        user=self.config.nickname,
                    )
                raise
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError(
                f"invalid utf-8 in received line: {e.reason}",
                data={"position": e.start, "line": raw},
            ) from e
        logger.log_event(
            "irc", "raw", level=logging.DEBUG, user=self.config.nickname, raw=line
        )
        return parse_message(line)

    async def close(self) -> None:
        """Close the socket; a pending ``read_next`` ends with end of stream."""
        if self._closed:
            return
        self._closed = True
        try:
            self._writer.close()
            await self._writer.wait_closed()
        except (OSError, RuntimeError) as e:
            logger.log_event(
                "irc",
                "close_error",
                level=logging.WARNING,
                user=self.config.nickname,
                error=str(e),
            )
        logger.log_event(
            "irc",
            "state_change",
            level=logging.DEBUG,
            user=self.config.nickname,
            old_state="opened",
            new_state="closed",
        )
        logger.log_event(
            "irc", "disconnected", level=logging.DEBUG, user=self.config.nickname
        )

    async def __aenter__(self) -> OpenedConnection:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


async def open_connection(config: TwitchConfig) -> OpenedConnection:
    """Shortcut for ``ClosedConnection(config).open()``."""
    return await ClosedConnection(config).open()


__all__ = ["ClosedConnection", "OpenedConnection", "open_connection"]
