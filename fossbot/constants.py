"""
Configuration constants for fossbot

This module contains the sizing limits, protocol codes and delays used
throughout the application. Each integer constant can be overridden by setting
an environment variable with the same name.
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


# Wire limits (fixed capacities; inputs are truncated, never overflowed)
IRC_LINE_MAX = _get_env_int("IRC_LINE_MAX", 512)  # Bytes per line including CRLF
NICK_MAX = _get_env_int("NICK_MAX", 32)
USER_MAX = _get_env_int("USER_MAX", 32)
ADDRESS_MAX = _get_env_int("ADDRESS_MAX", 64)
PORT_MAX = _get_env_int("PORT_MAX", 6)  # Up to "65535"
CHANNEL_NAME_MAX = _get_env_int("CHANNEL_NAME_MAX", 50)
MAX_CHANNELS = _get_env_int("MAX_CHANNELS", 5)  # Joined channel capacity
READ_CHUNK_SIZE = _get_env_int("READ_CHUNK_SIZE", 4096)  # Bytes per socket read

# Numeric replies handled by the state machine
ERR_NICKNAMEINUSE = 433
RPL_ENDOFMOTD = 376
ERR_NOMOTD = 422

NICK_COLLISION_SUFFIX = "_"

# Timing
KICK_REJOIN_DELAY = _get_env_float(
    "KICK_REJOIN_DELAY", 4.0
)  # Seconds to wait before rejoining a channel we were kicked from
IDENTIFY_TIMEOUT = _get_env_float(
    "IDENTIFY_TIMEOUT", 10.0
)  # Seconds to wait for the auth service's ACC answer
CONNECT_TIMEOUT = _get_env_float("CONNECT_TIMEOUT", 30.0)

# Authentication service
AUTH_SERVICE_NICK = "NickServ"
AUTH_IDENTIFIED_LEVEL = 3  # ACC level for a nick identified by password
AUTH_REGISTERED_NOTICE = "This nickname is registered"

# CTCP
CTCP_DELIMITER = "\x01"

KICK_MESSAGE = "magkas..."  # Sent to the kicker after rejoining

# Bot command limits
MAX_PING_COUNT = _get_env_int("MAX_PING_COUNT", 10)
DEFAULT_PING_COUNT = 3
TRACEROUTE_MAX_HOPS = _get_env_int("TRACEROUTE_MAX_HOPS", 20)
MAX_COMMITS = _get_env_int("MAX_COMMITS", 10)
COMMAND_OUTPUT_MAX_LINES = _get_env_int(
    "COMMAND_OUTPUT_MAX_LINES", 30
)  # Lines of tool output relayed to IRC
COMMAND_TIMEOUT_SECONDS = _get_env_int("COMMAND_TIMEOUT_SECONDS", 60)
QUOTE_LINE_DELAY = _get_env_float("QUOTE_LINE_DELAY", 1.0)

# Network/HTTP constants
HTTP_REQUEST_TIMEOUT_SECONDS = _get_env_int(
    "HTTP_REQUEST_TIMEOUT_SECONDS", 30
)  # Default HTTP request timeout
GITHUB_API_URL = "https://api.github.com"

# Retry/backoff constants
DEFAULT_MAX_RETRY_ATTEMPTS = _get_env_int(
    "DEFAULT_MAX_RETRY_ATTEMPTS", 3
)  # Default maximum retry attempts
RETRY_BACKOFF_MULTIPLIER = _get_env_int(
    "RETRY_BACKOFF_MULTIPLIER", 1
)  # Exponential backoff multiplier
RETRY_MAX_BACKOFF_SECONDS = _get_env_int(
    "RETRY_MAX_BACKOFF_SECONDS", 60
)  # Maximum backoff time in seconds

DEFAULT_CONFIG_FILE = "config.json"
