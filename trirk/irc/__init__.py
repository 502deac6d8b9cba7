"""IRC subsystem package.

Framing, parsing, tag decoding, the connection state machine, and the
dispatcher/listener pair that drives a connection.
"""

from .connection import ClosedConnection, OpenedConnection, open_connection  # noqa: F401
from .dispatcher import IRCDispatcher  # noqa: F401
from .framing import FrameReader  # noqa: F401
from .listener import IRCListener  # noqa: F401
from .models import (  # noqa: F401
    Badge,
    Command,
    CommandKind,
    Emote,
    Message,
    Source,
    TagSet,
)
from .parser import IRCParser, parse_message, parse_source  # noqa: F401
from .tags import encode_tags, parse_badges, parse_emotes, parse_tags  # noqa: F401

__all__ = [
    "Badge",
    "ClosedConnection",
    "Command",
    "CommandKind",
    "Emote",
    "FrameReader",
    "IRCDispatcher",
    "IRCListener",
    "IRCParser",
    "Message",
    "OpenedConnection",
    "Source",
    "TagSet",
    "encode_tags",
    "open_connection",
    "parse_badges",
    "parse_emotes",
    "parse_message",
    "parse_source",
    "parse_tags",
]
