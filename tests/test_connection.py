import logging

import pytest

from fossbot.constants import IRC_LINE_MAX, NICK_MAX
from fossbot.irc.connection import Connection, validate_endpoint


def test_command_with_text(conn, writer):
    conn.send_message("#foss", "hello")
    assert writer.chunks == [b"PRIVMSG #foss :hello\r\n"]


def test_command_without_text(conn, writer):
    conn.send_command("JOIN", "#foss")
    assert writer.chunks == [b"JOIN #foss\r\n"]


def test_quit_has_no_target(conn, writer):
    conn.quit("Bye")
    assert writer.lines == ["QUIT :Bye"]


def test_registration_commands(conn, writer):
    conn.set_nick("fossbot")
    conn.set_user("fossbot")
    assert writer.lines == ["NICK fossbot", "USER fossbot 0 * :fossbot"]


def test_set_nick_truncates(conn):
    conn.set_nick("x" * (NICK_MAX + 5))
    assert len(conn.nick) == NICK_MAX


def test_outbound_line_is_capped(conn, writer):
    conn.send_message("#foss", "y" * 1000)
    assert len(writer.chunks[0]) == IRC_LINE_MAX
    assert writer.chunks[0].endswith(b"\r\n")


def test_embedded_newlines_cannot_inject_commands(conn, writer):
    conn.send_message("#foss", "ok\r\nQUIT :pwned")
    assert writer.lines == ["PRIVMSG #foss :ok  QUIT :pwned"]


def test_notice(conn, writer):
    conn.send_notice("alice", "hi")
    assert writer.lines == ["NOTICE alice :hi"]


def test_redacted_lines_are_not_logged(conn, caplog):
    caplog.set_level(logging.DEBUG, logger="fossbot")
    conn.send_message("NickServ", "identify secret", redact=True)
    assert "secret" not in caplog.text


def test_snapshot_shares_writer_and_rendezvous(connected, writer):
    snap = connected.snapshot()
    assert snap.rendezvous is connected.rendezvous
    assert snap.config is connected.config
    snap.channels.swap_remove(0)
    snap.nick = "other"
    snap.send_message("#a", "from thread")
    assert len(connected.channels) == 3
    assert connected.nick == "bot"
    assert writer.lines == ["PRIVMSG #a :from thread"]


def test_new_connection_starts_disconnected(config, writer):
    conn = Connection(config, writer)
    assert not conn.connected
    assert conn.address == "irc.example.net"
    assert conn.port == "6667"


@pytest.mark.parametrize(
    ("address", "port", "ok"),
    [
        ("irc.example.net", 6667, True),
        ("127.0.0.1", "6697", True),
        ("localhost", 6667, False),
        ("irc.example.net", 70000, False),
        ("irc.example.net", "abc", False),
        ("irc.example.net", 0, False),
    ],
)
def test_validate_endpoint(address, port, ok):
    assert validate_endpoint(address, port) is ok
