import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from trirk.errors import (
    ConnectionClosedError,
    FramingError,
    IncompleteFrameError,
    LineTooLongError,
    TransportError,
)
from trirk.irc.framing import FrameReader

STREAM = (
    b"PING :tmi.twitch.tv\r\n"
    b"@color=#FF0000 :a!a@a.tmi.twitch.tv PRIVMSG #c :hello\r\n"
    b":tmi.twitch.tv 001 trirkbot :Welcome, GLHF!\r\n"
)
EXPECTED = [
    b"PING :tmi.twitch.tv",
    b"@color=#FF0000 :a!a@a.tmi.twitch.tv PRIVMSG #c :hello",
    b":tmi.twitch.tv 001 trirkbot :Welcome, GLHF!",
]


def _stream_reader(*chunks: bytes, eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    for chunk in chunks:
        reader.feed_data(chunk)
    if eof:
        reader.feed_eof()
    return reader


class TestFeed:
    """Buffer behaviour independent of any stream."""

    def setup_method(self):
        self.frames = FrameReader()

    def test_privmsg_split_across_reads(self):
        assert self.frames.feed(b"PRIVMSG #c :he") == []
        assert self.frames.feed(b"llo\r\n") == [b"PRIVMSG #c :hello"]

    def test_line_split_across_reads(self):
        assert self.frames.feed(b"PING :tmi.tw") == []
        assert self.frames.feed(b"itch.tv\r\n") == [b"PING :tmi.twitch.tv"]
        assert self.frames.buffer == bytearray()

    def test_several_lines_in_one_read(self):
        assert self.frames.feed(STREAM) == EXPECTED

    def test_trailing_fragment_is_kept(self):
        assert self.frames.feed(b"PING\r\nPIN") == [b"PING"]
        assert bytes(self.frames.buffer) == b"PIN"

    def test_terminator_split_between_reads(self):
        assert self.frames.feed(b"PING\r") == []
        assert self.frames.feed(b"\nPING\r\n") == [b"PING", b"PING"]

    def test_bare_line_feed_is_not_a_terminator(self):
        assert self.frames.feed(b"PING\nPONG\r\n") == [b"PING\nPONG"]

    def test_empty_line_is_yielded(self):
        assert self.frames.feed(b"\r\n") == [b""]

    def test_every_split_point_gives_same_lines(self):
        for cut in range(len(STREAM) + 1):
            frames = FrameReader()
            lines = frames.feed(STREAM[:cut]) + frames.feed(STREAM[cut:])
            assert lines == EXPECTED, f"split at {cut}"
            assert frames.buffer == bytearray()

    def test_byte_by_byte(self):
        lines = []
        for i in range(len(STREAM)):
            lines.extend(self.frames.feed(STREAM[i : i + 1]))
        assert lines == EXPECTED

    def test_finish_on_empty_buffer_is_clean_close(self):
        with pytest.raises(ConnectionClosedError):
            self.frames.finish()
        assert self.frames.eof is True

    def test_finish_with_pending_bytes_is_incomplete_frame(self):
        self.frames.feed(b"PRIVMSG #c :hal")

        with pytest.raises(IncompleteFrameError) as exc_info:
            self.frames.finish()

        assert exc_info.value.data["pending_bytes"] == 15
        assert exc_info.value.data["pending"] == b"PRIVMSG #c :hal"


class TestLineLimit:
    """Lines longer than max_line_bytes are dropped, not buffered."""

    def setup_method(self):
        self.frames = FrameReader(max_line_bytes=8)

    def test_long_complete_line_is_dropped(self):
        lines = self.frames.feed(b"PING\r\n0123456789\r\nPONG\r\n")

        assert lines == [b"PING", b"PONG"]
        assert self.frames.dropped_lines == 1

    def test_line_at_limit_is_kept(self):
        assert self.frames.feed(b"01234567\r") == []
        assert self.frames.feed(b"\n") == [b"01234567"]
        assert self.frames.dropped_lines == 0

    def test_unterminated_overflow_is_discarded_until_terminator(self):
        assert self.frames.feed(b"0123456789") == []
        assert len(self.frames.buffer) == 0
        assert self.frames.feed(b"abcdefghij" * 10) == []
        assert len(self.frames.buffer) == 0

        assert self.frames.feed(b"xyz\r\nPING\r\n") == [b"PING"]
        assert self.frames.dropped_lines == 1

    def test_terminator_split_while_discarding(self):
        assert self.frames.feed(b"0123456789\r") == []
        assert self.frames.feed(b"\nPING\r\n") == [b"PING"]
        assert self.frames.dropped_lines == 1


@pytest.mark.asyncio
async def test_read_line_across_chunks():
    frames = FrameReader(_stream_reader(b"PING :tmi.tw", b"itch.tv\r\n"), chunk_size=4)

    assert await frames.read_line() == b"PING :tmi.twitch.tv"
    with pytest.raises(ConnectionClosedError):
        await frames.read_line()


@pytest.mark.asyncio
async def test_read_line_returns_queued_lines_before_reading():
    reader = _stream_reader(STREAM)
    frames = FrameReader(reader)

    lines = [await frames.read_line() for _ in EXPECTED]

    assert lines == EXPECTED


@pytest.mark.asyncio
async def test_read_line_incomplete_frame_at_eof():
    frames = FrameReader(_stream_reader(b"PING\r\nPRIVMSG #c :hal"))

    assert await frames.read_line() == b"PING"
    with pytest.raises(IncompleteFrameError):
        await frames.read_line()
    # the stream stays finished
    with pytest.raises(ConnectionClosedError):
        await frames.read_line()


@pytest.mark.asyncio
async def test_read_line_without_reader():
    with pytest.raises(ConnectionClosedError):
        await FrameReader().read_line()


@pytest.mark.asyncio
async def test_read_failure_becomes_transport_error():
    reader = Mock()
    reader.read = AsyncMock(side_effect=OSError("network unreachable"))
    frames = FrameReader(reader)

    with pytest.raises(TransportError) as exc_info:
        await frames.read_line()

    assert isinstance(exc_info.value.__cause__, OSError)
    assert exc_info.value.data["operation"] == "read"


@pytest.mark.asyncio
async def test_reset_becomes_connection_closed():
    reader = Mock()
    reader.read = AsyncMock(side_effect=ConnectionResetError("reset by peer"))

    with pytest.raises(ConnectionClosedError):
        await FrameReader(reader).read_line()


@pytest.mark.asyncio
async def test_async_iteration_stops_at_clean_eof():
    frames = FrameReader(_stream_reader(STREAM[:30], STREAM[30:]), chunk_size=7)

    lines = [line async for line in frames]

    assert lines == EXPECTED


@pytest.mark.asyncio
async def test_async_iteration_raises_on_partial_line():
    frames = FrameReader(_stream_reader(STREAM + b"PING"))

    with pytest.raises(IncompleteFrameError):
        async for _ in frames:
            pass


@pytest.mark.asyncio
async def test_read_line_reports_long_line_once():
    frames = FrameReader(
        _stream_reader(b"PING\r\n", b"0123456789", b"abcdef\r\nPONG\r\n"),
        chunk_size=5,
        max_line_bytes=8,
    )

    assert await frames.read_line() == b"PING"
    with pytest.raises(LineTooLongError) as exc_info:
        await frames.read_line()
    assert isinstance(exc_info.value, FramingError)
    assert exc_info.value.data["limit"] == 8
    assert await frames.read_line() == b"PONG"
    with pytest.raises(ConnectionClosedError):
        await frames.read_line()
