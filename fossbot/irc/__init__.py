"""IRC subsystem package.

Contains the line transport, parser, numeric reply handling, channel
membership, NickServ rendezvous, dispatcher and client lifecycle modules.
"""

from .channels import ChannelSet, join_channel, remove_channel  # noqa: F401
from .client import IRCClient  # noqa: F401
from .connection import Connection, validate_endpoint  # noqa: F401
from .dispatcher import IRCDispatcher  # noqa: F401
from .identity import AuthRendezvous, user_is_identified  # noqa: F401
from .models import ConnectionState, ParsedMessage  # noqa: F401
from .numeric import handle_numeric  # noqa: F401
from .parser import parse_line, ping_token, resolve_reply_target  # noqa: F401
from .transport import LineTransport  # noqa: F401

__all__ = [
    "AuthRendezvous",
    "ChannelSet",
    "Connection",
    "ConnectionState",
    "IRCClient",
    "IRCDispatcher",
    "LineTransport",
    "ParsedMessage",
    "handle_numeric",
    "join_channel",
    "parse_line",
    "ping_token",
    "remove_channel",
    "resolve_reply_target",
    "user_is_identified",
    "validate_endpoint",
]
