"""
Configuration constants for the ircflow session core

Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

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


def _get_env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value else default


# Connection defaults
IRC_DEFAULT_PORT = _get_env_int("IRC_DEFAULT_PORT", 6667)  # Plain-text IRC port
IRC_CONNECT_TIMEOUT = _get_env_float(
    "IRC_CONNECT_TIMEOUT", 30.0
)  # Seconds to wait for the TCP (and TLS) handshake
IRC_READ_CHUNK_SIZE = _get_env_int(
    "IRC_READ_CHUNK_SIZE", 4096
)  # Bytes requested per socket read

# Decoding
IRC_DEFAULT_ENCODING = _get_env_str(
    "IRC_DEFAULT_ENCODING", "ISO-8859-15"
)  # Fallback codec for lines that are not valid UTF-8

# CTCP
CTCP_VERSION_REPLY = _get_env_str(
    "CTCP_VERSION_REPLY", "ircflow"
)  # Body of the default CTCP VERSION reply
