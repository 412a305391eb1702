"""The per-session connection aggregate and outbound command framing."""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable

from ..config.model import BotConfig
from ..constants import (
    ADDRESS_MAX,
    IRC_LINE_MAX,
    MAX_CHANNELS,
    NICK_MAX,
    PORT_MAX,
    USER_MAX,
)
from ..logs.logger import logger
from .channels import ChannelSet
from .identity import AuthRendezvous
from .models import ConnectionState
from .transport import LineTransport

Writer = Callable[[bytes], None]


def validate_endpoint(address: str, port: int | str) -> bool:
    """Minimum sanity check: a dotted address and a port in 1..65535."""
    if "." not in address:
        return False
    try:
        number = int(port)
    except (TypeError, ValueError):
        return False
    return 0 < number <= 65535


def _one_line(text: str) -> str:
    return text.replace("\r", " ").replace("\n", " ")


class Connection:
    """Everything one network session owns.

    The receive loop holds the authoritative instance. Bot command threads
    get ``snapshot()`` copies: they can send, and they can use the NickServ
    rendezvous, but changes they make to nick or channels stay private.
    """

    def __init__(
        self,
        config: BotConfig,
        writer: Writer,
        transport: LineTransport | None = None,
    ) -> None:
        self.config = config
        self._write = writer
        self.transport = transport or LineTransport(None)
        self.address = config.server[:ADDRESS_MAX]
        self.port = str(config.port)[:PORT_MAX]
        self.nick = ""
        self.user = ""
        self.channels = ChannelSet(MAX_CHANNELS)
        self.rendezvous = AuthRendezvous()
        self.state = ConnectionState.DISCONNECTED
        self.is_snapshot = False
        self._receive_thread = threading.get_ident()

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def mark_connected(self) -> None:
        self.state = ConnectionState.CONNECTED

    def on_receive_thread(self) -> bool:
        return threading.get_ident() == self._receive_thread

    def snapshot(self) -> Connection:
        """Private copy for a bot command thread."""
        clone = copy.copy(self)
        clone.channels = self.channels.copy()
        clone.transport = LineTransport(None)
        clone.is_snapshot = True
        return clone

    # ---- registration -------------------------------------------------

    def set_nick(self, nick: str) -> None:
        if not nick:
            raise ValueError("nick must not be empty")
        self.nick = nick[:NICK_MAX]
        self.send_command("NICK", self.nick)

    def set_user(self, user: str) -> None:
        if not user:
            raise ValueError("user must not be empty")
        self.user = user[:USER_MAX]
        self.send_command("USER", f"{self.user} 0 * :{self.user}")

    # ---- outbound -----------------------------------------------------

    def send_command(
        self, kind: str, target: str, text: str | None = None, *, redact: bool = False
    ) -> str:
        """Frame and send one command line.

        ``"<TYPE> <target> :<text>"`` when text is given, ``"<TYPE> <target>"``
        otherwise. The encoded line, CRLF included, never exceeds
        IRC_LINE_MAX bytes. Returns the line as sent (without CRLF).
        """
        head = f"{kind} {target}" if target else kind
        line = f"{head} :{_one_line(text)}" if text else head
        data = line.encode("utf-8")
        if len(data) > IRC_LINE_MAX - 2:
            data = data[: IRC_LINE_MAX - 2]
            line = data.decode("utf-8", errors="ignore")
            data = line.encode("utf-8")

        shown = f"{head} :<redacted>" if redact and text else line
        logger.log_event(
            "irc",
            "raw_out",
            level=logging.INFO if self.config.verbose else logging.DEBUG,
            nick=self.nick or None,
            line=shown,
        )
        self._write(data + b"\r\n")
        return line

    def send_message(self, target: str, text: str, *, redact: bool = False) -> str:
        return self.send_command("PRIVMSG", target, text, redact=redact)

    def send_notice(self, target: str, text: str) -> str:
        return self.send_command("NOTICE", target, text)

    def quit(self, message: str) -> str:
        return self.send_command("QUIT", "", message)
