"""Per-command reactions to parsed messages."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from ..logs.logger import logger
from .models import CommandKind, Message

if TYPE_CHECKING:  # pragma: no cover
    from .connection import OpenedConnection

MessageHandler = Callable[[str, str, str], Any]
EventHandler = Callable[[Message], Any]


async def _call(handler: Callable[..., Any], *args: Any) -> None:
    if inspect.iscoroutinefunction(handler):
        await handler(*args)
        return
    maybe = handler(*args)
    if inspect.isawaitable(maybe):
        await maybe


class IRCDispatcher:
    """Routes each ``Message`` by ``CommandKind``.

    ``PING`` is answered with ``pong()``; chat, membership, moderation and
    room-state events are logged. A message handler receives
    ``(author, channel, text)`` for every chat message and an event handler
    receives every ``Message``. Handler exceptions are logged, never raised.
    """

    def __init__(self, nickname: str, channel: str) -> None:
        self.nickname = nickname
        self.channel = channel
        self.message_handler: MessageHandler | None = None
        self.event_handler: EventHandler | None = None
        self._routes: dict[
            CommandKind, Callable[[Message, OpenedConnection], Awaitable[None]]
        ] = {
            CommandKind.PING: self._handle_ping,
            CommandKind.PRIVATE_MESSAGE: self._handle_privmsg,
            CommandKind.JOIN: self._handle_join,
            CommandKind.PART: self._handle_part,
            CommandKind.NOTICE: self._handle_notice,
            CommandKind.CLEAR_CHAT: self._handle_clear_chat,
            CommandKind.CLEAR_MESSAGE: self._handle_clear_message,
            CommandKind.ROOM_STATE: self._handle_state,
            CommandKind.USER_STATE: self._handle_state,
            CommandKind.GLOBAL_USER_STATE: self._handle_state,
            CommandKind.HOST_TARGET: self._handle_host_target,
            CommandKind.CAPABILITY_ACK: self._handle_capability,
            CommandKind.RECONNECT: self._handle_reconnect,
            CommandKind.NUMERIC: self._handle_numeric,
            CommandKind.UNKNOWN: self._handle_unknown,
        }

    def set_message_handler(self, handler: MessageHandler) -> None:
        self.message_handler = handler

    def set_event_handler(self, handler: EventHandler) -> None:
        self.event_handler = handler

    async def dispatch(self, message: Message, connection: OpenedConnection) -> None:
        await self._routes[message.kind](message, connection)
        if self.event_handler:
            await self._invoke(self.event_handler, message)

    async def _invoke(self, handler: Callable[..., Any], *args: Any) -> None:
        try:
            await _call(handler, *args)
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "chat",
                "handler_error",
                level=logging.ERROR,
                user=self.nickname,
                error=str(e),
                error_type=type(e).__name__,
            )

    async def _handle_ping(self, message: Message, connection: OpenedConnection) -> None:
        await connection.pong()

    async def _handle_privmsg(self, message: Message, connection: OpenedConnection) -> None:
        author = message.nick
        text = message.parameters or ""
        is_own = author.lower() == self.nickname.lower()
        logger.log_event(
            "chat",
            "privmsg",
            level=logging.INFO if is_own else logging.DEBUG,
            user=self.nickname,
            channel=self.channel,
            author=author,
            text=text,
            self_message=is_own,
        )
        if not self.message_handler:
            logger.log_event(
                "chat", "no_message_handler", level=logging.DEBUG, user=self.nickname
            )
            return
        await self._invoke(self.message_handler, author, self.channel, text)

    async def _handle_join(self, message: Message, connection: OpenedConnection) -> None:
        logger.log_event(
            "chat",
            "join",
            level=logging.DEBUG,
            user=self.nickname,
            channel=self.channel,
            nick=message.nick,
        )

    async def _handle_part(self, message: Message, connection: OpenedConnection) -> None:
        logger.log_event(
            "chat",
            "part",
            level=logging.DEBUG,
            user=self.nickname,
            channel=self.channel,
            nick=message.nick,
        )

    async def _handle_notice(self, message: Message, connection: OpenedConnection) -> None:
        logger.log_event(
            "chat",
            "notice",
            user=self.nickname,
            channel=self.channel,
            text=message.parameters or "",
            msg_id=message.tags.msg_id if message.tags else "",
        )

    async def _handle_clear_chat(
        self, message: Message, connection: OpenedConnection
    ) -> None:
        # Trailing parameter names the timed out or banned user, if any
        target = f" for {message.parameters}" if message.parameters else ""
        logger.log_event(
            "chat",
            "clear_chat",
            user=self.nickname,
            channel=self.channel,
            target=target,
            ban_duration=message.tags.ban_duration if message.tags else 0,
        )

    async def _handle_clear_message(
        self, message: Message, connection: OpenedConnection
    ) -> None:
        tags = message.tags
        logger.log_event(
            "chat",
            "clear_message",
            user=self.nickname,
            channel=self.channel,
            target_msg_id=tags.target_msg_id if tags else "",
            login=tags.login if tags else "",
        )

    async def _handle_state(self, message: Message, connection: OpenedConnection) -> None:
        action = {
            CommandKind.ROOM_STATE: "room_state",
            CommandKind.USER_STATE: "user_state",
            CommandKind.GLOBAL_USER_STATE: "global_user_state",
        }[message.kind]
        logger.log_event(
            "chat",
            action,
            level=logging.DEBUG,
            user=self.nickname,
            channel=self.channel,
            display_name=message.tags.display_name if message.tags else "",
        )

    async def _handle_host_target(
        self, message: Message, connection: OpenedConnection
    ) -> None:
        logger.log_event(
            "chat",
            "host_target",
            user=self.nickname,
            channel=self.channel,
            text=message.parameters or "",
        )

    async def _handle_capability(
        self, message: Message, connection: OpenedConnection
    ) -> None:
        logger.log_event(
            "chat",
            "capability_ack",
            level=logging.DEBUG,
            user=self.nickname,
            text=message.parameters or "",
        )

    async def _handle_reconnect(
        self, message: Message, connection: OpenedConnection
    ) -> None:
        logger.log_event(
            "chat", "reconnect_requested", level=logging.WARNING, user=self.nickname
        )

    async def _handle_numeric(self, message: Message, connection: OpenedConnection) -> None:
        logger.log_event(
            "chat",
            "numeric",
            level=logging.DEBUG,
            user=self.nickname,
            code=message.command.numeric,
        )

    async def _handle_unknown(self, message: Message, connection: OpenedConnection) -> None:
        logger.log_event(
            "chat",
            "unknown",
            level=logging.DEBUG,
            user=self.nickname,
            verb=message.command.verb,
        )
