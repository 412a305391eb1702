"""Shared IRC data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTED = auto()


@dataclass(frozen=True, slots=True)
class ParsedMessage:
    """One inbound line broken into its parts.

    ``sender`` is a nick or server name, ``target`` the reply-to address
    (empty until resolved) and ``payload`` whatever text remains.
    """

    sender: str
    command: str
    target: str
    payload: str
