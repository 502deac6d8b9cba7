"""Listener loop: read, dispatch, and reconnect on terminal failures."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_exponential,
)

from ..config.model import TwitchConfig
from ..constants import (
    ASYNC_IRC_READ_TIMEOUT,
    RECONNECT_BASE_DELAY,
    RECONNECT_MAX_ATTEMPTS,
    RECONNECT_MAX_DELAY,
)
from ..errors import (
    DecodingError,
    FramingError,
    IncompleteFrameError,
    TransportError,
    log_error,
)
from ..logging_config import client_stats
from ..logs.logger import logger
from .connection import OpenedConnection, open_connection
from .dispatcher import IRCDispatcher
from .models import CommandKind, Message

Connector = Callable[[TwitchConfig], Awaitable[OpenedConnection]]


class IRCListener:
    """Owns the event loop for one channel.

    Line-level noise (malformed, over-long or undecodable lines) is logged and
    skipped. Transport failures, end of stream, a line cut off by the peer, a
    read timeout and a server ``RECONNECT`` end the current connection; the
    listener then discards it and opens a new one.

    Two backoffs apply. Failed connect attempts are retried by tenacity.
    Sessions that open but end before a single line arrives are counted in
    ``failed_sessions``, and each reconnect after one waits on the same
    exponential schedule. The count resets once a session receives a line.
    """

    def __init__(
        self,
        config: TwitchConfig,
        dispatcher: IRCDispatcher | None = None,
        *,
        connector: Connector = open_connection,
        read_timeout: float = ASYNC_IRC_READ_TIMEOUT,
        max_attempts: int = RECONNECT_MAX_ATTEMPTS,
        base_delay: float = RECONNECT_BASE_DELAY,
        max_delay: float = RECONNECT_MAX_DELAY,
    ) -> None:
        self.config = config
        self.dispatcher = dispatcher or IRCDispatcher(config.nickname, config.channel)
        self.connector = connector
        self.read_timeout = read_timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.connection: OpenedConnection | None = None
        self.running = False
        self.sessions = 0
        self.failed_sessions = 0
        self._stopped = asyncio.Event()

    def _wait_strategy(self) -> wait_exponential:
        return wait_exponential(multiplier=self.base_delay, max=self.max_delay)

    async def connect(self) -> OpenedConnection:
        """Open a connection, retrying transport failures with backoff.

        Raises:
            TransportError: The last failure once ``max_attempts`` is exhausted.
        """
        stop = stop_after_attempt(self.max_attempts) if self.max_attempts else stop_never
        retrying = AsyncRetrying(
            stop=stop,
            wait=self._wait_strategy(),
            retry=retry_if_exception_type(TransportError),
            before_sleep=self._before_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    connection = await self.connector(self.config)
        except TransportError as e:
            logger.log_event(
                "listener",
                "reconnect_exhausted",
                level=logging.ERROR,
                user=self.config.nickname,
                attempts=self.max_attempts,
                error=str(e),
            )
            raise
        self.connection = connection
        self.sessions += 1
        if self.sessions > 1:
            client_stats.record_reconnect()
            logger.log_event(
                "listener",
                "reconnect_success",
                user=self.config.nickname,
                attempt=self.sessions - 1,
            )
        return connection

    def _before_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(error, Exception):
            log_error("Connection attempt failed", error, level=logging.WARNING)
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.log_event(
            "listener",
            "reconnect_scheduled",
            level=logging.WARNING,
            user=self.config.nickname,
            delay=delay,
            attempt=retry_state.attempt_number,
        )

    def session_delay(self) -> float:
        """Pause owed before the next connect, given ``failed_sessions``."""
        if not self.failed_sessions:
            return 0.0
        state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})
        state.attempt_number = self.failed_sessions
        return self._wait_strategy()(state)

    async def _pause_before_reconnect(self) -> None:
        delay = self.session_delay()
        if delay <= 0:
            return
        logger.log_event(
            "listener",
            "session_backoff",
            level=logging.WARNING,
            user=self.config.nickname,
            failed=self.failed_sessions,
            delay=delay,
        )
        try:
            # stop() cuts the pause short
            await asyncio.wait_for(self._stopped.wait(), timeout=delay)
        except TimeoutError:
            return

    async def listen(self) -> None:
        """Run until ``stop()`` is called or reconnecting gives up."""
        self.running = True
        self._stopped.clear()
        logger.log_event("listener", "start", user=self.config.nickname)
        try:
            while self.running:
                await self._pause_before_reconnect()
                if not self.running:
                    break
                connection = await self.connect()
                try:
                    received = await self._consume(connection)
                finally:
                    await connection.close()
                    self.connection = None
                self.failed_sessions = 0 if received else self.failed_sessions + 1
        finally:
            self.running = False
            logger.log_event(
                "listener", "stopped", level=logging.WARNING, user=self.config.nickname
            )

    async def _read(self, connection: OpenedConnection) -> Message:
        if self.read_timeout > 0:
            return await asyncio.wait_for(
                connection.read_next(), timeout=self.read_timeout
            )
        return await connection.read_next()

    async def _consume(self, connection: OpenedConnection) -> bool:
        """Drive one session; returns whether any line arrived on it."""
        received = False
        while self.running:
            try:
                message = await self._read(connection)
            except TimeoutError:
                logger.log_event(
                    "listener",
                    "read_timeout",
                    level=logging.WARNING,
                    user=self.config.nickname,
                    timeout=self.read_timeout,
                )
                return received
            except (TransportError, IncompleteFrameError) as e:
                if self.running:
                    log_error("Connection ended", e, level=logging.WARNING)
                return received
            except (FramingError, DecodingError) as e:
                received = True
                client_stats.record_skipped_line()
                logger.log_event(
                    "listener",
                    "line_skipped",
                    level=logging.WARNING,
                    user=self.config.nickname,
                    error=str(e),
                )
                continue
            received = True
            try:
                await self.dispatcher.dispatch(message, connection)
            except TransportError as e:
                log_error("Reply failed", e, level=logging.WARNING)
                return received
            if message.kind is CommandKind.RECONNECT:
                return received
        return received

    async def stop(self) -> None:
        """Stop listening; closing the socket unblocks the pending read."""
        self.running = False
        self._stopped.set()
        if self.connection is not None:
            await self.connection.close()


__all__ = ["IRCListener"]
