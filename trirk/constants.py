"""
Configuration constants for the trirk chat client.

Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Chat server endpoint (plain TCP, no TLS)
IRC_HOST = os.getenv("IRC_HOST", "irc.chat.twitch.tv")
IRC_PORT = _get_env_int("IRC_PORT", 6667)

# Line terminator for every protocol frame
LINE_TERMINATOR = b"\r\n"

# Bytes requested from the socket per read
READ_CHUNK_SIZE = _get_env_int("READ_CHUNK_SIZE", 4096)

# Longest line kept in the frame buffer; Twitch caps tags at 8 KiB plus a 512 byte body
MAX_LINE_BYTES = _get_env_int("MAX_LINE_BYTES", 16384)

# Capabilities requested during the handshake, in wire order
IRC_CAPABILITIES = (
    "twitch.tv/commands",
    "twitch.tv/membership",
    "twitch.tv/tags",
)

# Fixed reply to a server keep-alive PING
PONG_REPLY = "PONG :tmi.twitch.tv"

# Connection timing
ASYNC_IRC_CONNECT_TIMEOUT = _get_env_float(
    "ASYNC_IRC_CONNECT_TIMEOUT", 15.0
)  # Seconds allowed for TCP connect
ASYNC_IRC_READ_TIMEOUT = _get_env_float(
    "ASYNC_IRC_READ_TIMEOUT", 0.0
)  # Listener read timeout; 0 disables it (Twitch pings every ~5 minutes)

# Reconnect backoff used by the listener
RECONNECT_BASE_DELAY = _get_env_float("RECONNECT_BASE_DELAY", 1.0)
RECONNECT_MAX_DELAY = _get_env_float("RECONNECT_MAX_DELAY", 60.0)
RECONNECT_MAX_ATTEMPTS = _get_env_int(
    "RECONNECT_MAX_ATTEMPTS", 0
)  # 0 retries forever
