"""Tag block decoding (``@key=value;key=value``).

Decoding never fails: entries without ``=`` are skipped, numeric fields fall
back to ``0``, malformed badges and emotes are dropped, and keys outside the
known set are preserved verbatim in ``extra_tags``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .models import BADGE_NAMES, Badge, Emote, TagSet


def _flag(value: str) -> bool:
    return value == "1"


def _is_digits(value: str) -> bool:
    # int() alone would also take " 5", "+5" and "1_000"
    return value.isascii() and value.isdecimal()


def _int_or_zero(value: str) -> int:
    if not _is_digits(value):
        return 0
    return int(value)


def parse_badges(value: str) -> Badge:
    """Decode ``name/version,name/version``; unknown names and bad pairs are skipped."""
    held: dict[str, str] = {}
    for pair in value.split(","):
        name, sep, version = pair.partition("/")
        if not sep or name not in BADGE_NAMES:
            continue
        held[name] = version
    return Badge(**held)


def parse_emotes(value: str) -> list[Emote]:
    """Decode ``code:start-end[/start-end...]`` entries separated by commas.

    Each range yields one ``Emote``; ranges with missing or non-numeric
    offsets are skipped.
    """
    emotes: list[Emote] = []
    for entry in value.split(","):
        code, sep, positions = entry.partition(":")
        if not sep or not code:
            continue
        for span in positions.split("/"):
            start, dash, end = span.partition("-")
            if not dash or not _is_digits(start) or not _is_digits(end):
                continue
            emotes.append(Emote(code, int(start), int(end)))
    return emotes


def parse_emote_sets(value: str) -> list[int]:
    return [_int_or_zero(v) for v in value.split(",")]


# tag key -> (TagSet field, decoder)
_DECODERS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "badges": ("badges", parse_badges),
    "color": ("color", str),
    "display-name": ("display_name", str),
    "emote-only": ("emote_only", _flag),
    "emotes": ("emotes", parse_emotes),
    "id": ("id", str),
    "mod": ("mod", _flag),
    "room-id": ("room_id", str),
    "subscriber": ("subscriber", _flag),
    "turbo": ("turbo", _flag),
    "tmi-sent-ts": ("tmi_sent_ts", _int_or_zero),
    "user-id": ("user_id", str),
    "user-type": ("user_type", str),
    "vip": ("vip", _flag),
    "reply-parent-msg-id": ("reply_parent_msg_id", str),
    "target-user-id": ("target_user_id", str),
    "msg-id": ("msg_id", str),
    "ban-duration": ("ban_duration", _int_or_zero),
    "login": ("login", str),
    "target-msg-id": ("target_msg_id", str),
    "emote-sets": ("emote_sets", parse_emote_sets),
    "followers-only": ("followers_only", _flag),
    "r9k": ("r9k", _flag),
    "slow": ("slow", _int_or_zero),
    "subs-only": ("subs_only", _flag),
}

KNOWN_TAGS = tuple(_DECODERS)


def parse_tags(raw: str) -> TagSet:
    """Decode a tag block into a ``TagSet``.

    ``raw`` is the block without its leading ``@``; a stray ``@`` is stripped.
    Each entry is split once on ``=``, so values may themselves contain ``=``.
    A repeated key keeps its last value.
    """
    if raw.startswith("@"):
        raw = raw[1:]
    fields: dict[str, Any] = {}
    extra: dict[str, str] = {}
    for entry in raw.split(";"):
        key, sep, value = entry.partition("=")
        if not sep or not key:
            continue
        decoder = _DECODERS.get(key)
        if decoder is None:
            extra[key] = value
            continue
        field_name, decode = decoder
        fields[field_name] = decode(value)
    return TagSet(**fields, extra_tags=extra)


def _encode_badges(badge: Badge) -> str:
    return ",".join(f"{name}/{version}" for name, version in badge.held().items())


def _encode_emotes(emotes: tuple[Emote, ...]) -> str:
    # consecutive ranges of one code share an entry; order is preserved
    groups: list[tuple[str, list[str]]] = []
    for emote in emotes:
        span = f"{emote.start}-{emote.end}"
        if groups and groups[-1][0] == emote.code:
            groups[-1][1].append(span)
        else:
            groups.append((emote.code, [span]))
    return ",".join(f"{code}:{'/'.join(spans)}" for code, spans in groups)


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, Badge):
        return _encode_badges(value)
    if isinstance(value, tuple):
        if value and isinstance(value[0], Emote):
            return _encode_emotes(value)
        return ",".join(str(v) for v in value)
    return str(value)


def encode_tags(tags: TagSet) -> str:
    """Render a ``TagSet`` back into tag block form (without the ``@``).

    Known fields still at their zero value are omitted, then ``extra_tags``
    follow in insertion order.
    """
    defaults = TagSet()
    entries: list[str] = []
    for key, (field_name, _) in _DECODERS.items():
        value = getattr(tags, field_name)
        if value == getattr(defaults, field_name):
            continue
        entries.append(f"{key}={_encode_value(value)}")
    entries.extend(f"{key}={value}" for key, value in tags.extra_tags.items())
    return ";".join(entries)


__all__ = [
    "KNOWN_TAGS",
    "encode_tags",
    "parse_badges",
    "parse_emote_sets",
    "parse_emotes",
    "parse_tags",
]
