import pytest

from fossbot.config.model import BotConfig
from fossbot.irc.connection import Connection


class RecordingWriter:
    """Stands in for the socket writer; records every outbound line."""

    def __init__(self) -> None:
        self.chunks: list[bytes] = []

    def __call__(self, data: bytes) -> None:
        self.chunks.append(data)

    @property
    def lines(self) -> list[str]:
        return [c.decode("utf-8").removesuffix("\r\n") for c in self.chunks]

    def clear(self) -> None:
        self.chunks.clear()


@pytest.fixture
def config() -> BotConfig:
    return BotConfig(
        server="irc.example.net",
        port=6667,
        nick="bot",
        channels=["#foss"],
        nick_password="hunter2",
        bot_version="fossbot 1.0",
    )


@pytest.fixture
def writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def conn(config: BotConfig, writer: RecordingWriter) -> Connection:
    connection = Connection(config, writer)
    connection.nick = "bot"
    connection.user = "bot"
    return connection


@pytest.fixture
def connected(conn: Connection, writer: RecordingWriter) -> Connection:
    """A registered connection with #a, #b and #c joined."""
    conn.mark_connected()
    for name in ("#a", "#b", "#c"):
        conn.channels.add(name)
    writer.clear()
    return conn
