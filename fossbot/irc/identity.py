"""NickServ ACC queries.

A bot command thread asks NickServ about a nick and blocks on a single-slot
queue; the receive loop's NOTICE handler decodes the answer and drops the
access level into that slot.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import TYPE_CHECKING

from ..constants import AUTH_IDENTIFIED_LEVEL, AUTH_SERVICE_NICK, IDENTIFY_TIMEOUT
from ..errors.internal import InternalError
from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection


class AuthRendezvous:
    """Pending ACC queries keyed by the (lower-cased) nick they ask about."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: dict[str, queue.Queue[int]] = {}

    def open(self, nick: str) -> queue.Queue[int]:
        slot: queue.Queue[int] = queue.Queue(maxsize=1)
        with self._lock:
            self._pending[nick.lower()] = slot
        return slot

    def close(self, nick: str, slot: queue.Queue[int]) -> None:
        with self._lock:
            if self._pending.get(nick.lower()) is slot:
                del self._pending[nick.lower()]

    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def deliver(self, nick: str | None, level: int) -> bool:
        """Hand an access level to the query waiting on ``nick``.

        Without a nick the value goes to the only pending query, if there is
        exactly one. An answer about a nick nobody asked for is dropped.
        Returns False when nobody is waiting.
        """
        with self._lock:
            if nick:
                slot = self._pending.get(nick.lower())
            elif len(self._pending) == 1:
                slot = next(iter(self._pending.values()))
            else:
                slot = None
        if slot is None:
            logger.log_event(
                "auth", "acc_unclaimed", level=logging.DEBUG, target=nick, level_value=level
            )
            return False
        try:
            slot.put_nowait(level)
        except queue.Full:
            return False
        return True


def parse_acc_reply(text: str) -> tuple[str | None, int] | None:
    """Decode ``"<nick> ACC <level>"`` into (nick, level).

    Returns None when the text carries no ACC token. An unreadable level
    decodes as 0.
    """
    tokens = text.split()
    if "ACC" not in tokens:
        return None
    idx = tokens.index("ACC")
    nick = tokens[idx - 1] if idx > 0 else None
    try:
        level = int(tokens[idx + 1])
    except (IndexError, ValueError):
        level = 0
    return nick, level


def user_is_identified(
    conn: Connection, nick: str, timeout: float | None = None
) -> bool:
    """Ask NickServ whether ``nick`` is identified, blocking for the answer.

    Only meaningful from a bot command thread: the answer is delivered by the
    receive loop, so calling this on the loop itself would deadlock.

    Returns:
        True if NickServ reports the nick as identified by password.

    Raises:
        InternalError: Called from the receive loop thread.
    """
    if conn.on_receive_thread():
        raise InternalError("Identity query would block the receive loop")
    if timeout is None:
        timeout = IDENTIFY_TIMEOUT

    rendezvous = conn.rendezvous
    slot = rendezvous.open(nick)
    try:
        conn.send_message(AUTH_SERVICE_NICK, f"ACC {nick}")
        try:
            level = slot.get(timeout=timeout)
        except queue.Empty:
            logger.log_event(
                "auth", "acc_timeout", level=logging.WARNING, nick=conn.nick, target=nick, timeout=timeout
            )
            return False
    finally:
        rendezvous.close(nick, slot)

    logger.log_event("auth", "acc_result", level=logging.DEBUG, target=nick, level_value=level)
    return level == AUTH_IDENTIFIED_LEVEL
