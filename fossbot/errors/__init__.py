"""Error hierarchy and handling helpers."""

from .internal import (  # noqa: F401
    ChannelLimitError,
    ConfigError,
    ConnectionLostError,
    InternalError,
    NetworkError,
    ParsingError,
)

__all__ = [
    "InternalError",
    "NetworkError",
    "ConnectionLostError",
    "ChannelLimitError",
    "ParsingError",
    "ConfigError",
]
