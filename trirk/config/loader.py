"""Configuration loading from the environment (and an optional ``.env`` file)."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..logs.logger import logger
from .model import TwitchConfig

ENV_CHANNEL = "TRIRK_CHANNEL"
ENV_OAUTH = "TRIRK_OAUTH"
ENV_NICKNAME = "TRIRK_NICKNAME"
ENV_HOST = "TRIRK_HOST"
ENV_PORT = "TRIRK_PORT"


class ConfigError(ValueError):
    """Raised when the environment does not describe a usable configuration."""


class ConfigLoader:
    """Builds a ``TwitchConfig`` from environment variables."""

    def __init__(self, env_file: str | os.PathLike[str] | None = None) -> None:
        self.env_file = Path(env_file) if env_file else None

    def load_env_file(self) -> bool:
        """Load ``.env`` into ``os.environ`` without overriding existing values."""
        path = self.env_file or Path.cwd() / ".env"
        loaded = load_dotenv(path, override=False)
        if loaded:
            logger.log_event("config", "dotenv_loaded", level=logging.DEBUG, path=str(path))
        return loaded

    @staticmethod
    def raw_from_env(environ: Mapping[str, str] | None = None) -> dict[str, str]:
        env = os.environ if environ is None else environ
        raw = {
            "channel": env.get(ENV_CHANNEL),
            "oauth": env.get(ENV_OAUTH),
            "nickname": env.get(ENV_NICKNAME),
            "host": env.get(ENV_HOST),
            "port": env.get(ENV_PORT),
        }
        return {k: v for k, v in raw.items() if v}

    def get_configuration(self, environ: Mapping[str, str] | None = None) -> TwitchConfig:
        """Load and validate the configuration.

        Raises:
            ConfigError: A required variable is missing or a value is invalid.
        """
        if environ is None:
            self.load_env_file()
        raw = self.raw_from_env(environ)
        missing = [
            name
            for name, key in (
                (ENV_CHANNEL, "channel"),
                (ENV_OAUTH, "oauth"),
                (ENV_NICKNAME, "nickname"),
            )
            if key not in raw
        ]
        if missing:
            raise ConfigError(f"please set {', '.join(missing)}")
        try:
            config = TwitchConfig.from_dict(raw)
        except ValidationError as e:
            raise ConfigError(str(e)) from e
        logger.log_event(
            "config",
            "loaded",
            user=config.nickname,
            nickname=config.nickname,
            channel_name=config.channel,
        )
        return config


def get_configuration(env_file: str | os.PathLike[str] | None = None) -> TwitchConfig:
    return ConfigLoader(env_file).get_configuration()
