from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import IRC_HOST, IRC_PORT


class TwitchConfig(BaseModel):
    """Connection settings for one chat channel.

    Attributes:
        nickname: Login name used for ``NICK``; stored lowercase.
        oauth: Chat token sent with ``PASS``; the ``oauth:`` prefix is added
            when missing.
        channel: Channel to join, stored lowercase without ``#``.
        host: Chat server host name.
        port: Chat server TCP port.
    """

    model_config = ConfigDict(frozen=True)

    nickname: str = Field(min_length=1, max_length=25)
    oauth: str = Field(min_length=1, repr=False)
    channel: str = Field(min_length=1)
    host: str = IRC_HOST
    port: int = Field(default=IRC_PORT, ge=1, le=65535)

    @field_validator("nickname", mode="before")
    @classmethod
    def normalize_nickname(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("nickname must be a string")
        return v.strip().lower()

    @field_validator("channel", mode="before")
    @classmethod
    def normalize_channel(cls, v: Any) -> str:
        """Strip whitespace and the leading '#', lowercase the rest."""
        if not isinstance(v, str):
            raise ValueError("channel must be a string")
        return v.strip().lstrip("#").lower()

    @field_validator("oauth", mode="before")
    @classmethod
    def normalize_oauth(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("oauth must be a string")
        token = v.strip()
        if not token:
            return token
        return token if token.startswith("oauth:") else f"oauth:{token}"

    @field_validator("nickname", "oauth", "channel", "host")
    @classmethod
    def reject_line_breaks(cls, v: str) -> str:
        if any(c in v for c in "\r\n "):
            raise ValueError("value must not contain spaces or line breaks")
        return v

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TwitchConfig:
        return cls.model_validate(dict(data))

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()
