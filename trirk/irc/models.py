"""Structured chat protocol messages.

All models are immutable; a ``Message`` is produced once per parsed line and
compares structurally, so parsing the same line twice yields equal values.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class CommandKind(Enum):
    PRIVATE_MESSAGE = "PRIVMSG"
    PART = "PART"
    JOIN = "JOIN"
    NOTICE = "NOTICE"
    CLEAR_CHAT = "CLEARCHAT"
    CLEAR_MESSAGE = "CLEARMSG"
    HOST_TARGET = "HOSTTARGET"
    PING = "PING"
    CAPABILITY_ACK = "CAP"
    GLOBAL_USER_STATE = "GLOBALUSERSTATE"
    USER_STATE = "USERSTATE"
    ROOM_STATE = "ROOMSTATE"
    RECONNECT = "RECONNECT"
    NUMERIC = "<numeric>"
    UNKNOWN = "<unknown>"

    @classmethod
    def from_verb(cls, verb: str) -> CommandKind:
        """Map a command verb to its kind.

        Keywords are matched exactly; a verb that parses as an unsigned 16-bit
        integer is ``NUMERIC``; everything else is ``UNKNOWN``.
        """
        kind = _KEYWORDS.get(verb)
        if kind is not None:
            return kind
        if verb.isdecimal() and verb.isascii() and int(verb) <= 0xFFFF:
            return cls.NUMERIC
        return cls.UNKNOWN


_KEYWORDS: dict[str, CommandKind] = {
    kind.value: kind
    for kind in CommandKind
    if kind not in (CommandKind.NUMERIC, CommandKind.UNKNOWN)
}


@dataclass(frozen=True, slots=True)
class Source:
    """Sender of a line: ``nick!user@host``, or a bare server host with no nick."""

    nick: str
    host: str


@dataclass(frozen=True, slots=True)
class Command:
    """Command verb plus the token the parser associates with it.

    ``channel`` is overloaded: on source-prefixed lines it is the sender's
    nick (empty for server-originated lines), on unprefixed ``JOIN`` lines it
    is the joined channel. ``verb`` is the verb exactly as received, which is
    how ``NUMERIC`` and ``UNKNOWN`` commands keep their data.
    """

    kind: CommandKind
    channel: str = ""
    verb: str = ""

    def __post_init__(self) -> None:
        if not self.verb and self.kind not in (CommandKind.NUMERIC, CommandKind.UNKNOWN):
            object.__setattr__(self, "verb", self.kind.value)

    @property
    def numeric(self) -> int | None:
        """Reply code for ``NUMERIC`` commands, ``None`` otherwise."""
        if self.kind is CommandKind.NUMERIC:
            return int(self.verb)
        return None


@dataclass(frozen=True, slots=True)
class Badge:
    """Membership badges held by the sender, each with its version string.

    ``None`` means the badge is not held.
    """

    admin: str | None = None
    bits: str | None = None
    broadcaster: str | None = None
    moderator: str | None = None
    subscriber: str | None = None
    staff: str | None = None
    turbo: str | None = None

    def held(self) -> dict[str, str]:
        return {
            name: getattr(self, name)
            for name in BADGE_NAMES
            if getattr(self, name) is not None
        }


BADGE_NAMES = (
    "admin",
    "bits",
    "broadcaster",
    "moderator",
    "subscriber",
    "staff",
    "turbo",
)


@dataclass(frozen=True, slots=True)
class Emote:
    """Emote reference by inclusive character offsets into the parameter text.

    Offsets are not checked against the message length.
    """

    code: str
    start: int
    end: int


def _frozen_mapping(value: Mapping[str, str] | None = None) -> Mapping[str, str]:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class TagSet:
    """Decoded tag block.

    Tags are sparse: any known tag missing from the line keeps its zero value.
    Keys the decoder does not know are kept verbatim in ``extra_tags``.
    """

    badges: Badge = field(default_factory=Badge)
    color: str = ""
    display_name: str = ""
    emote_only: bool = False
    emotes: tuple[Emote, ...] = ()
    id: str = ""
    mod: bool = False
    room_id: str = ""
    subscriber: bool = False
    turbo: bool = False
    tmi_sent_ts: int = 0
    user_id: str = ""
    user_type: str = ""
    vip: bool = False
    reply_parent_msg_id: str = ""
    target_user_id: str = ""
    msg_id: str = ""
    ban_duration: int = 0
    login: str = ""
    target_msg_id: str = ""
    emote_sets: tuple[int, ...] = ()
    followers_only: bool = False
    r9k: bool = False
    slow: int = 0
    subs_only: bool = False
    extra_tags: Mapping[str, str] = field(default_factory=_frozen_mapping)

    def __post_init__(self) -> None:
        object.__setattr__(self, "emotes", tuple(self.emotes))
        object.__setattr__(self, "emote_sets", tuple(self.emote_sets))
        object.__setattr__(self, "extra_tags", _frozen_mapping(self.extra_tags))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagSet):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def _key(self) -> tuple:
        known = tuple(
            getattr(self, name)
            for name in self.__dataclass_fields__
            if name != "extra_tags"
        )
        return known + (tuple(sorted(self.extra_tags.items())),)


@dataclass(frozen=True, slots=True)
class Message:
    """One parsed protocol line."""

    command: Command
    source: Source | None = None
    tags: TagSet | None = None
    parameters: str | None = None

    @property
    def kind(self) -> CommandKind:
        return self.command.kind

    @property
    def nick(self) -> str:
        return self.source.nick if self.source else ""


__all__ = [
    "BADGE_NAMES",
    "Badge",
    "Command",
    "CommandKind",
    "Emote",
    "Message",
    "Source",
    "TagSet",
]
