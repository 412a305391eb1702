"""Bot command registry."""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from ..constants import AUTH_SERVICE_NICK
from ..irc.connection import Connection
from ..irc.identity import user_is_identified
from ..irc.models import ParsedMessage

Handler = Callable[[Connection, ParsedMessage], Any]


class CommandRegistry(Mapping[str, Handler]):
    """Exact, case-sensitive map from command name to handler.

    Filled once at startup, then frozen; lookups from the receive loop never
    race with registration.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}
        self._frozen = False

    def add(self, name: str, handler: Handler) -> None:
        if self._frozen:
            raise RuntimeError("command registry is frozen")
        if not name or " " in name:
            raise ValueError(f"invalid command name {name!r}")
        self._handlers[name] = handler

    def freeze(self) -> CommandRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __getitem__(self, name: str) -> Handler:
        return self._handlers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)


def requires_identified(handler: Handler) -> Handler:
    """Only run ``handler`` when NickServ reports the sender as identified."""

    @functools.wraps(handler)
    def wrapper(conn: Connection, message: ParsedMessage) -> Any:
        if not user_is_identified(conn, message.sender):
            conn.send_message(
                message.target,
                f"{message.sender}: identify with {AUTH_SERVICE_NICK} first",
            )
            return None
        return handler(conn, message)

    return wrapper
