"""trirk: client for Twitch's tag-extended IRC chat protocol."""

__version__ = "0.1.0"
