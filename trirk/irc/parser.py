"""Chat protocol line parsing.

Grammar of one line (terminator already removed)::

    [@<tags> ]:<source> <VERB>[ <args>][ :<trailing>]
    PING[ :<server>]
    <nick>!<user>@<host> JOIN #<channel>

Only structural breakage raises; malformed tag sub-fields are absorbed by the
tag decoder.
"""

from __future__ import annotations

from ..errors import FramingError, UnrecognizedLineError
from .models import Command, CommandKind, Message, Source, TagSet
from .tags import parse_tags


def parse_source(token: str) -> Source:
    """Split ``nick!user@host``; anything without both delimiters is a bare host."""
    bang = token.find("!")
    at = token.find("@")
    if bang == -1 or at == -1:
        return Source(nick="", host=token)
    return Source(nick=token[:bang], host=token[at + 1 :])


def _parse_trailing(rest: str) -> str | None:
    colon = rest.find(":")
    if colon == -1:
        return None
    return rest[colon + 1 :]


def _split_tags(line: str) -> tuple[TagSet | None, str]:
    if not line.startswith("@"):
        return None, line
    tag_block, sep, rest = line.partition(" ")
    if not sep:
        raise FramingError(
            "tag block is not followed by a space", data={"line": line}
        )
    return parse_tags(tag_block[1:]), rest


def _parse_prefixed(line: str, tags: TagSet | None) -> Message:
    # line starts after the leading ':'
    source_token, sep, rest = line.partition(" ")
    if not sep:
        raise FramingError(
            "source prefix is not followed by a space", data={"line": line}
        )
    source = parse_source(source_token)
    verb, _, args = rest.partition(" ")
    command = Command(CommandKind.from_verb(verb), channel=source.nick, verb=verb)
    return Message(
        command=command,
        source=source,
        tags=tags,
        parameters=_parse_trailing(args),
    )


def _parse_unprefixed(line: str, tags: TagSet | None) -> Message:
    verb, _, args = line.partition(" ")
    if verb == "PING":
        return Message(
            command=Command(CommandKind.PING), tags=tags, parameters=_parse_trailing(args)
        )
    # <source> JOIN #<channel>: the verb sits in the second position
    tokens = line.split(" ", 2)
    if len(tokens) > 1 and tokens[1] == "JOIN":
        if len(tokens) < 3 or not tokens[2]:
            raise FramingError("JOIN line has no channel", data={"line": line})
        source = parse_source(tokens[0].removeprefix(":"))
        channel = tokens[2].split(" ", 1)[0].lstrip("#")
        return Message(
            command=Command(CommandKind.JOIN, channel=channel),
            source=source,
            tags=tags,
        )
    raise UnrecognizedLineError(line)


def parse_message(line: str) -> Message:
    """Parse one protocol line into a ``Message``.

    Raises:
        FramingError: Empty line, or a tag block / source prefix without the
            space that must follow it.
        UnrecognizedLineError: Line shape matches none of the known forms.
    """
    if not line:
        raise FramingError("empty irc message")
    tags, rest = _split_tags(line)
    if rest.startswith(":"):
        return _parse_prefixed(rest[1:], tags)
    if not rest:
        raise FramingError("tag block without a command", data={"line": line})
    return _parse_unprefixed(rest, tags)


class IRCParser:
    """Stateless parser object for callers that prefer an instance."""

    __slots__ = ()

    def parse(self, line: str) -> Message:
        return parse_message(line)


__all__ = ["IRCParser", "parse_message", "parse_source"]
