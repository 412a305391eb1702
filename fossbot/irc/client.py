"""Connection bootstrap and the main receive loop."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Mapping

from ..config.model import BotConfig
from ..constants import CONNECT_TIMEOUT
from ..errors.internal import ChannelLimitError, ConnectionLostError
from ..logs.logger import logger
from .channels import join_channel
from .connection import Connection, Writer, validate_endpoint
from .dispatcher import Handler, IRCDispatcher
from .transport import LineTransport


def make_threadsafe_writer(
    writer: asyncio.StreamWriter, loop: asyncio.AbstractEventLoop
) -> Writer:
    """Wrap a StreamWriter so bot command threads can send through it.

    Calls from the loop thread write directly; calls from other threads are
    handed to the loop, preserving per-thread order.
    """
    loop_thread = threading.get_ident()

    def write(data: bytes) -> None:
        if writer.is_closing():
            raise ConnectionLostError("Failed to send message: connection closing")
        if threading.get_ident() == loop_thread:
            writer.write(data)
        else:
            loop.call_soon_threadsafe(writer.write, data)

    return write


class IRCClient:
    """Owns one network session from TCP connect to QUIT."""

    def __init__(self, config: BotConfig, registry: Mapping[str, Handler]) -> None:
        self.config = config
        self.dispatcher = IRCDispatcher(registry)
        self.writer: asyncio.StreamWriter | None = None
        self.running = False

    async def connect(self) -> Connection | None:
        """Open the TCP stream and build the connection.

        Returns None (after logging why) if the endpoint is invalid or the
        connection cannot be established.
        """
        config = self.config
        if not validate_endpoint(config.server, config.port):
            logger.log_event(
                "irc", "invalid_endpoint", level=logging.ERROR, server=config.server, port=config.port
            )
            return None
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(config.server, config.port),
                timeout=CONNECT_TIMEOUT,
            )
        except (OSError, asyncio.TimeoutError) as e:
            logger.log_event(
                "irc",
                "connect_failed",
                level=logging.ERROR,
                server=config.server,
                port=config.port,
                error=str(e) or type(e).__name__,
            )
            return None

        self.writer = writer
        loop = asyncio.get_running_loop()
        conn = Connection(
            config,
            make_threadsafe_writer(writer, loop),
            LineTransport(reader),
        )
        logger.log_event("irc", "connected", server=config.server, port=config.port)
        return conn

    def register(self, conn: Connection) -> None:
        """Send NICK/USER and queue the configured channels."""
        conn.set_nick(self.config.nick)
        conn.set_user(self.config.user or self.config.nick)
        for channel in self.config.channels:
            try:
                join_channel(conn, channel)
            except ChannelLimitError:
                break

    async def run(self, conn: Connection) -> None:
        """Receive loop: one line at a time, in arrival order.

        Raises:
            ConnectionLostError: The stream failed; there is no reconnect.
        """
        self.running = True
        try:
            while self.running:
                line = await conn.transport.read_line()
                if line is None:
                    continue
                await self.dispatcher.handle_line(conn, line)
        finally:
            self.running = False

    def stop(self) -> None:
        self.running = False

    async def quit(self, conn: Connection, message: str | None = None) -> None:
        """Send QUIT and close the stream."""
        self.stop()
        try:
            conn.quit(message or self.config.quit_message)
        except ConnectionLostError:
            pass
        if self.writer is not None:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass
            self.writer = None
        logger.log_event("irc", "disconnected", nick=conn.nick)
