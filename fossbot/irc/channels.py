"""Channel membership bookkeeping and the join workflow."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..constants import CHANNEL_NAME_MAX, MAX_CHANNELS
from ..errors.internal import ChannelLimitError
from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection


class ChannelSet:
    """Fixed-capacity array of channel names plus a live count.

    Removal swaps the last live entry into the freed slot, so storage order
    is not preserved.
    """

    def __init__(self, capacity: int = MAX_CHANNELS) -> None:
        self.capacity = capacity
        self._slots: list[str] = [""] * capacity
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[str]:
        return iter(self._slots[: self._count])

    def __contains__(self, name: object) -> bool:
        return name in self._slots[: self._count]

    def is_full(self) -> bool:
        return self._count >= self.capacity

    def add(self, name: str) -> str:
        """Store ``name`` (truncated) in the next free slot and return it."""
        if self.is_full():
            raise ChannelLimitError(
                f"Channel limit reached ({self.capacity})",
                data={"channel": name, "capacity": self.capacity},
            )
        stored = name[:CHANNEL_NAME_MAX]
        self._slots[self._count] = stored
        self._count += 1
        return stored

    def index(self, name: str) -> int | None:
        for i in range(self._count):
            if self._slots[i] == name:
                return i
        return None

    def swap_remove(self, index: int) -> str:
        if not 0 <= index < self._count:
            raise IndexError(index)
        removed = self._slots[index]
        self._count -= 1
        self._slots[index] = self._slots[self._count]
        self._slots[self._count] = ""
        return removed

    def copy(self) -> ChannelSet:
        clone = ChannelSet(self.capacity)
        clone._slots = list(self._slots)
        clone._count = self._count
        return clone


def join_channel(conn: Connection, name: str | None) -> int:
    """Record a channel and join it, or replay joins for every recorded channel.

    With a name: the channel is stored and JOIN is sent right away when the
    connection is registered; before that it stays queued for the replay
    that follows end-of-MOTD. Returns 1.

    With None: sends JOIN for each recorded channel in storage order if
    connected. Returns the number of JOINs sent.

    Raises:
        ValueError: ``name`` does not start with '#'.
        ChannelLimitError: The channel set is full; nothing is sent.
    """
    if name is not None:
        if not name.startswith("#"):
            raise ValueError(f"Missing # in channel {name!r}")
        try:
            stored = conn.channels.add(name)
        except ChannelLimitError:
            logger.log_event(
                "irc",
                "channel_limit",
                level=logging.ERROR,
                nick=conn.nick,
                channel=name,
                capacity=conn.channels.capacity,
            )
            raise
        if conn.connected:
            conn.send_command("JOIN", stored)
        else:
            logger.log_event(
                "irc", "join_queued", level=logging.DEBUG, nick=conn.nick, channel=stored
            )
        return 1

    sent = 0
    if conn.connected:
        for channel in conn.channels:
            conn.send_command("JOIN", channel)
            sent += 1
    return sent


def remove_channel(conn: Connection, name: str) -> bool:
    """Forget ``name``. Returns False (and warns) if it was never recorded."""
    idx = conn.channels.index(name)
    if idx is None:
        logger.log_event(
            "irc", "kick_unknown_channel", level=logging.WARNING, nick=conn.nick, channel=name
        )
        return False
    conn.channels.swap_remove(idx)
    return True
