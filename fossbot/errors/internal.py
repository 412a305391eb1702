"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the receive loop, the
configuration layer and the retry helpers. Raw socket / aiohttp / JSON errors
are wrapped into one of these at the boundary where they occur.

Classes:
  InternalError        - Base for all internal errors.
  NetworkError         - Transient network/IO issues (safe to retry).
  ConnectionLostError  - The IRC stream failed or closed; fatal for the session.
  ChannelLimitError    - Join refused because the channel set is full.
  ParsingError         - Response parsing / schema validation issues.
  ConfigError          - Configuration file missing or invalid.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors.

    This includes issues such as connection timeouts, resets, or other
    transient network failures that may be retried.
    """


class ConnectionLostError(NetworkError):
    """The IRC byte stream reported a hard error or end of file.

    There is no reconnection logic; the receive loop stops and the process
    exits with a diagnostic.
    """


class ChannelLimitError(InternalError):
    """Raised when joining would exceed the channel capacity.

    The channel set is left unchanged and no JOIN is sent.
    """


class ParsingError(InternalError):
    """Exception raised for response parsing or schema validation errors."""


class ConfigError(InternalError):
    """Configuration file could not be read or failed validation."""


__all__ = [
    "InternalError",
    "NetworkError",
    "ConnectionLostError",
    "ChannelLimitError",
    "ParsingError",
    "ConfigError",
]
