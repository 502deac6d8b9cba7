import asyncio

import pytest
import pytest_asyncio

from trirk.config import TwitchConfig


class FakeIRCServer:
    """Local TCP server standing in for the chat server.

    Every accepted client is queued as a ``(reader, writer)`` pair so a test
    can play the server side of the conversation.
    """

    def __init__(self) -> None:
        self.server: asyncio.AbstractServer | None = None
        self.port = 0
        self.clients: asyncio.Queue[tuple[asyncio.StreamReader, asyncio.StreamWriter]] = (
            asyncio.Queue()
        )
        self._writers: list[asyncio.StreamWriter] = []

    async def start(self) -> None:
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self.server.sockets[0].getsockname()[1]

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self._writers.append(writer)
        await self.clients.put((reader, writer))

    async def accept(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        return await asyncio.wait_for(self.clients.get(), timeout=5)

    async def close(self) -> None:
        for writer in self._writers:
            writer.close()
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()


@pytest_asyncio.fixture
async def irc_server():
    server = FakeIRCServer()
    await server.start()
    yield server
    await server.close()


@pytest.fixture
def make_config():
    def _make(**overrides) -> TwitchConfig:
        data = {
            "nickname": "trirkbot",
            "oauth": "abcdefghijklmnop",
            "channel": "evazord",
        }
        data.update(overrides)
        return TwitchConfig(**data)

    return _make


@pytest.fixture
def server_config(irc_server, make_config) -> TwitchConfig:
    return make_config(host="127.0.0.1", port=irc_server.port)
