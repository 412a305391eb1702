"""Line dispatch: keep-alive, numeric replies, core handlers and bot commands."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from ..constants import (
    AUTH_REGISTERED_NOTICE,
    AUTH_SERVICE_NICK,
    CTCP_DELIMITER,
    KICK_MESSAGE,
    KICK_REJOIN_DELAY,
)
from ..errors.internal import ChannelLimitError
from ..logs.logger import logger
from .channels import join_channel, remove_channel
from .connection import Connection
from .identity import parse_acc_reply
from .models import ParsedMessage
from .numeric import handle_numeric
from .parser import (
    numeric_code,
    parse_line,
    ping_token,
    resolve_reply_target,
    split_text,
    strip_hostmask,
)

Handler = Callable[[Connection, ParsedMessage], Any]


def run_isolated(name: str, handler: Handler, conn: Connection, message: ParsedMessage) -> None:
    """Body of a bot command thread.

    Coroutine handlers get an event loop of their own. Any exception stays in
    the thread and is only logged.
    """
    try:
        result = handler(conn, message)
        if inspect.iscoroutine(result):
            asyncio.run(result)
    except Exception as e:  # noqa: BLE001
        logger.log_event(
            "bot",
            "command_error",
            level=logging.ERROR,
            nick=message.sender,
            channel=message.target,
            command=name,
            error=str(e),
            error_type=type(e).__name__,
        )


class IRCDispatcher:
    """Routes each inbound line to the handler that owns it.

    Server commands (PING, numerics, PRIVMSG, NOTICE, KICK) are handled
    inline on the receive loop. ``!name`` messages are looked up in the
    command registry and run on their own daemon thread with a snapshot of
    the connection; the dispatcher never waits for them.
    """

    def __init__(
        self,
        registry: Mapping[str, Handler],
        kick_rejoin_delay: float = KICK_REJOIN_DELAY,
    ) -> None:
        self.registry = registry
        self.kick_rejoin_delay = kick_rejoin_delay
        self.tasks: set[asyncio.Task[None]] = set()
        self._server_handlers: dict[str, Callable[[Connection, ParsedMessage], None]] = {
            "PRIVMSG": self._handle_privmsg,
            "NOTICE": self._handle_notice,
            "KICK": self._handle_kick,
        }

    async def handle_line(self, conn: Connection, line: str) -> None:
        logger.log_event(
            "irc",
            "raw_in",
            level=logging.INFO if conn.config.verbose else logging.DEBUG,
            nick=conn.nick or None,
            line=line,
        )

        token = ping_token(line)
        if token is not None:
            conn.send_command("PONG", token)
            return

        parsed = parse_line(line)
        if parsed is None:
            return

        code = numeric_code(parsed.command)
        if code is not None:
            handle_numeric(conn, code)
            return

        handler = self._server_handlers.get(parsed.command)
        if handler is not None:
            handler(conn, parsed)

    async def drain(self) -> None:
        """Wait for pending kick-rejoin tasks (used on shutdown and in tests)."""
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)

    # ---- PRIVMSG ------------------------------------------------------

    def _handle_privmsg(self, conn: Connection, parsed: ParsedMessage) -> None:
        message = resolve_reply_target(parsed)
        if message is None:
            return
        word, args = split_text(message.payload)
        if not word:
            return

        if word.startswith("!"):
            self.dispatch_command(conn, message.sender, message.target, word[1:], args)
        elif word.startswith(CTCP_DELIMITER):
            self._handle_ctcp(conn, message.sender, word[1:])

    def dispatch_command(
        self, conn: Connection, sender: str, reply_to: str, name: str, args: str
    ) -> threading.Thread | None:
        """Start the registered handler for ``name`` on its own thread.

        Returns the started thread, or None if the command is unknown or the
        thread could not be started.
        """
        handler = self.registry.get(name)
        if handler is None:
            return None
        message = ParsedMessage(sender=sender, command=name, target=reply_to, payload=args)
        logger.log_event(
            "bot", "command", level=logging.DEBUG, nick=sender, channel=reply_to, command=name
        )
        thread = threading.Thread(
            target=run_isolated,
            args=(name, handler, conn.snapshot(), message),
            name=f"cmd-{name}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as e:
            logger.log_event(
                "bot",
                "spawn_failed",
                level=logging.ERROR,
                nick=sender,
                command=name,
                error=str(e),
            )
            return None
        return thread

    def _handle_ctcp(self, conn: Connection, sender: str, request: str) -> None:
        if request.startswith("VERSION"):
            conn.send_notice(
                sender, f"{CTCP_DELIMITER}VERSION {conn.config.bot_version}{CTCP_DELIMITER}"
            )

    # ---- NOTICE -------------------------------------------------------

    def _handle_notice(self, conn: Connection, parsed: ParsedMessage) -> None:
        sender = strip_hostmask(parsed.sender)
        if sender is None:
            return
        target, _, text = parsed.payload.partition(" ")
        if not target or not text:
            return
        text = text[1:] if text.startswith(":") else text

        if sender != AUTH_SERVICE_NICK:
            return

        acc = parse_acc_reply(text)
        if acc is not None:
            conn.rendezvous.deliver(*acc)
        elif text.startswith(AUTH_REGISTERED_NOTICE):
            self._identify(conn)

    @staticmethod
    def _identify(conn: Connection) -> None:
        secret = conn.config.nick_password
        password = secret.consume() if secret is not None else None
        if password is None:
            logger.log_event("auth", "no_password", level=logging.WARNING, nick=conn.nick)
            return
        conn.send_message(AUTH_SERVICE_NICK, f"identify {password}", redact=True)
        logger.log_event("auth", "identify_sent", nick=conn.nick)

    # ---- KICK ---------------------------------------------------------

    def _handle_kick(self, conn: Connection, parsed: ParsedMessage) -> None:
        kicker = strip_hostmask(parsed.sender)
        if kicker is None:
            return
        parts = parsed.payload.split()
        if len(parts) < 2:
            return
        channel, victim = parts[0], parts[1]
        if victim != conn.nick:
            return

        if not remove_channel(conn, channel):
            return
        logger.log_event(
            "irc", "kicked", level=logging.WARNING, nick=conn.nick, channel=channel, kicker=kicker
        )
        task = asyncio.get_running_loop().create_task(self._rejoin(conn, channel, kicker))
        self.tasks.add(task)
        task.add_done_callback(self._task_done)

    async def _rejoin(self, conn: Connection, channel: str, kicker: str) -> None:
        await asyncio.sleep(self.kick_rejoin_delay)
        try:
            join_channel(conn, channel)
        except ChannelLimitError:
            return
        conn.send_message(channel, f"{kicker} {KICK_MESSAGE}")

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self.tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            e = task.exception()
            logger.log_event(
                "irc",
                "rejoin_failed",
                level=logging.ERROR,
                error=str(e),
                error_type=type(e).__name__,
            )
