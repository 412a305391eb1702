import asyncio

import pytest

from fossbot.config.model import BotConfig
from fossbot.errors.internal import ConnectionLostError
from fossbot.irc.client import IRCClient


class FakeIRCServer:
    """Minimal line-based server on localhost for driving the client."""

    def __init__(self) -> None:
        self.received: list[str] = []
        self.got_line = asyncio.Event()
        self.writer: asyncio.StreamWriter | None = None
        self.connected = asyncio.Event()
        self.server: asyncio.AbstractServer | None = None

    async def start(self) -> int:
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        return self.server.sockets[0].getsockname()[1]

    async def _handle(self, reader, writer):
        self.writer = writer
        self.connected.set()
        while line := await reader.readline():
            self.received.append(line.decode().rstrip("\r\n"))
            self.got_line.set()

    async def send(self, data: bytes) -> None:
        self.writer.write(data)
        await self.writer.drain()

    async def wait_for(self, line: str, timeout: float = 2.0) -> None:
        async def _poll():
            while line not in self.received:
                self.got_line.clear()
                await self.got_line.wait()

        await asyncio.wait_for(_poll(), timeout)

    async def close(self) -> None:
        if self.writer is not None:
            self.writer.close()
        self.server.close()
        await self.server.wait_closed()


def _config(port: int, **overrides) -> BotConfig:
    data = {
        "server": "127.0.0.1",
        "port": port,
        "nick": "bot",
        "channels": ["#a", "#b"],
    }
    data.update(overrides)
    return BotConfig(**data)


@pytest.mark.asyncio
async def test_session_registers_and_joins_after_motd():
    server = FakeIRCServer()
    port = await server.start()
    client = IRCClient(_config(port), {})

    conn = await client.connect()
    assert conn is not None
    client.register(conn)
    loop_task = asyncio.create_task(client.run(conn))

    await server.connected.wait()
    await server.wait_for("USER bot 0 * :bot")
    assert server.received[:2] == ["NICK bot", "USER bot 0 * :bot"]
    assert "JOIN #a" not in server.received

    await server.send(b"PING :irc.local\r\n:irc.local 433 * bot :in use\r\n")
    await server.wait_for("PONG :irc.local")
    await server.wait_for("NICK bot_")

    await server.send(b":irc.local 376 bot_ :End of ")
    await server.send(b"/MOTD command.\r\n")
    await server.wait_for("JOIN #b")
    assert server.received.count("JOIN #a") == 1
    assert conn.connected

    await server.close()
    with pytest.raises(ConnectionLostError):
        await asyncio.wait_for(loop_task, 2)


@pytest.mark.asyncio
async def test_quit_sends_quit_and_closes():
    server = FakeIRCServer()
    port = await server.start()
    client = IRCClient(_config(port, quit_message="see you"), {})
    conn = await client.connect()
    await server.connected.wait()

    await client.quit(conn)
    await server.wait_for("QUIT :see you")
    assert client.writer is None
    await server.close()


@pytest.mark.asyncio
async def test_connect_refused_returns_none():
    server = FakeIRCServer()
    port = await server.start()
    await server.close()

    client = IRCClient(_config(port), {})
    assert await client.connect() is None


@pytest.mark.asyncio
async def test_invalid_endpoint_returns_none():
    config = _config(6667)
    config.server = "localhost"
    client = IRCClient(config, {})
    assert await client.connect() is None


@pytest.mark.asyncio
async def test_register_stops_at_channel_capacity(writer, config):
    from fossbot.constants import MAX_CHANNELS
    from fossbot.irc.connection import Connection

    config.channels = [f"#c{i}" for i in range(MAX_CHANNELS + 2)]
    conn = Connection(config, writer)
    IRCClient(config, {}).register(conn)
    assert len(conn.channels) == MAX_CHANNELS
    assert writer.lines == ["NICK bot", "USER bot 0 * :bot"]
