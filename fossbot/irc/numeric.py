"""Numeric reply handling (registration state machine)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import (
    ERR_NICKNAMEINUSE,
    ERR_NOMOTD,
    NICK_COLLISION_SUFFIX,
    RPL_ENDOFMOTD,
)
from ..logs.logger import logger
from .channels import join_channel

if TYPE_CHECKING:  # pragma: no cover
    from .connection import Connection


def handle_numeric(conn: Connection, code: int) -> int:
    if code == ERR_NICKNAMEINUSE:
        previous = conn.nick
        conn.set_nick(previous + NICK_COLLISION_SUFFIX)
        logger.log_event(
            "irc", "nick_in_use", level=logging.WARNING, nick=conn.nick, previous=previous
        )
    elif code in (RPL_ENDOFMOTD, ERR_NOMOTD):
        if not conn.connected:
            conn.mark_connected()
            joined = join_channel(conn, None)
            logger.log_event("irc", "registered", nick=conn.nick, joins=joined)
    else:
        logger.log_event("irc", "numeric_ignored", level=logging.DEBUG, code=code)
    return code
