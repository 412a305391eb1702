import logging
import threading
from unittest.mock import patch

import pytest

from fossbot.irc.dispatcher import IRCDispatcher


def _waiting_handler(calls: list, done: threading.Event):
    def handler(conn, msg):
        calls.append((conn, msg))
        done.set()

    return handler


@pytest.mark.asyncio
async def test_ping_answered_with_pong(conn, writer):
    disp = IRCDispatcher({})
    await disp.handle_line(conn, "PING :wolfe.example.net")
    assert writer.lines == ["PONG :wolfe.example.net"]


@pytest.mark.asyncio
async def test_private_command_replies_to_sender(conn):
    calls: list = []
    done = threading.Event()
    disp = IRCDispatcher({"ping": _waiting_handler(calls, done)})

    await disp.handle_line(conn, ":alice!a@host.example PRIVMSG bot :!ping 8.8.8.8")

    assert done.wait(2)
    _, msg = calls[0]
    assert msg.sender == "alice"
    assert msg.target == "alice"
    assert msg.command == "ping"
    assert msg.payload == "8.8.8.8"


@pytest.mark.asyncio
async def test_channel_command_replies_to_channel(conn):
    calls: list = []
    done = threading.Event()
    disp = IRCDispatcher({"list": _waiting_handler(calls, done)})

    await disp.handle_line(conn, ":alice!a@host PRIVMSG #foss :!list")

    assert done.wait(2)
    assert calls[0][1].target == "#foss"
    assert calls[0][1].payload == ""


@pytest.mark.asyncio
async def test_unknown_and_case_mismatched_commands_ignored(conn, writer):
    calls: list = []
    done = threading.Event()
    disp = IRCDispatcher({"list": _waiting_handler(calls, done)})

    await disp.handle_line(conn, ":alice!a@host PRIVMSG #foss :!nothing")
    await disp.handle_line(conn, ":alice!a@host PRIVMSG #foss :!LIST")
    await disp.handle_line(conn, ":alice!a@host PRIVMSG #foss :list")

    assert not done.wait(0.1)
    assert writer.lines == []


@pytest.mark.asyncio
async def test_handler_gets_private_snapshot(connected):
    done = threading.Event()
    seen = {}

    def handler(snap, msg):
        seen["snapshot"] = snap.is_snapshot
        snap.nick = "renamed"
        snap.channels.swap_remove(0)
        done.set()

    disp = IRCDispatcher({"mutate": handler})
    await disp.handle_line(connected, ":alice!a@host PRIVMSG #a :!mutate")

    assert done.wait(2)
    assert seen["snapshot"] is True
    assert connected.nick == "bot"
    assert list(connected.channels) == ["#a", "#b", "#c"]


@pytest.mark.asyncio
async def test_handler_exception_stays_in_its_thread(conn, writer, caplog):
    caplog.set_level(logging.ERROR, logger="fossbot")
    done = threading.Event()

    def boom(conn_, msg):
        done.set()
        raise RuntimeError("handler crashed")

    disp = IRCDispatcher({"boom": boom})
    await disp.handle_line(conn, ":alice!a@host PRIVMSG #foss :!boom")
    assert done.wait(2)

    for thread in threading.enumerate():
        if thread.name == "cmd-boom":
            thread.join(2)

    assert "handler crashed" in caplog.text
    await disp.handle_line(conn, "PING :still-alive")
    assert writer.lines[-1] == "PONG :still-alive"


@pytest.mark.asyncio
async def test_coroutine_handlers_run_on_their_own_loop(conn, writer):
    done = threading.Event()

    async def handler(snap, msg):
        snap.send_message(msg.target, "async reply")
        done.set()

    disp = IRCDispatcher({"hello": handler})
    await disp.handle_line(conn, ":alice!a@host PRIVMSG #foss :!hello")

    assert done.wait(2)
    assert "PRIVMSG #foss :async reply" in writer.lines


@pytest.mark.asyncio
async def test_spawn_failure_is_logged_and_skipped(conn, writer, caplog):
    caplog.set_level(logging.ERROR, logger="fossbot")
    disp = IRCDispatcher({"list": lambda c, m: None})

    with patch.object(threading.Thread, "start", side_effect=RuntimeError("can't start new thread")):
        thread = disp.dispatch_command(conn, "alice", "#foss", "list", "")

    assert thread is None
    assert "can't start new thread" in caplog.text


@pytest.mark.asyncio
async def test_ctcp_version_reply(conn, writer):
    disp = IRCDispatcher({})
    await disp.handle_line(conn, ":alice!a@host PRIVMSG bot :\x01VERSION\x01")
    assert writer.lines == ["NOTICE alice :\x01VERSION fossbot 1.0\x01"]


@pytest.mark.asyncio
async def test_other_ctcp_requests_ignored(conn, writer):
    disp = IRCDispatcher({})
    await disp.handle_line(conn, ":alice!a@host PRIVMSG bot :\x01TIME\x01")
    assert writer.lines == []


@pytest.mark.asyncio
async def test_server_originated_privmsg_dropped(conn, writer):
    disp = IRCDispatcher({})
    await disp.handle_line(conn, ":irc.example.net PRIVMSG bot :\x01VERSION\x01")
    assert writer.lines == []


@pytest.mark.asyncio
async def test_non_ascii_digit_command_is_ignored(conn, writer):
    disp = IRCDispatcher({})
    await disp.handle_line(conn, ":irc.example.net \u00b2 bot :x")
    assert writer.lines == []
    assert conn.nick == "bot"
    assert not conn.connected


@pytest.mark.asyncio
async def test_numeric_reply_routed_to_state_machine(conn, writer):
    disp = IRCDispatcher({})
    await disp.handle_line(conn, ":irc.example.net 433 * bot :Nickname is already in use")
    assert writer.lines == ["NICK bot_"]


@pytest.mark.asyncio
async def test_kick_of_own_nick_rejoins(connected, writer):
    disp = IRCDispatcher({}, kick_rejoin_delay=0)

    await disp.handle_line(connected, ":op!o@host KICK #b bot :behave")

    assert len(connected.channels) == 2
    assert "#b" not in connected.channels

    await disp.drain()
    assert writer.lines == ["JOIN #b", "PRIVMSG #b :op magkas..."]
    assert "#b" in connected.channels


@pytest.mark.asyncio
async def test_kick_of_someone_else_ignored(connected, writer):
    disp = IRCDispatcher({}, kick_rejoin_delay=0)
    await disp.handle_line(connected, ":op!o@host KICK #b alice :bye")
    await disp.drain()
    assert len(connected.channels) == 3
    assert writer.lines == []


@pytest.mark.asyncio
async def test_kick_from_unrecorded_channel_is_noop(connected, writer, caplog):
    caplog.set_level(logging.WARNING, logger="fossbot")
    disp = IRCDispatcher({}, kick_rejoin_delay=0)
    await disp.handle_line(connected, ":op!o@host KICK #elsewhere bot :bye")
    await disp.drain()
    assert len(connected.channels) == 3
    assert writer.lines == []
    assert caplog.records


@pytest.mark.asyncio
async def test_registered_notice_identifies_once(conn, writer, caplog):
    caplog.set_level(logging.DEBUG, logger="fossbot")
    disp = IRCDispatcher({})
    notice = ":NickServ!NickServ@services. NOTICE bot :This nickname is registered and protected."

    await disp.handle_line(conn, notice)
    await disp.handle_line(conn, notice)

    assert writer.lines == ["PRIVMSG NickServ :identify hunter2"]
    assert conn.config.nick_password.consumed
    assert "hunter2" not in caplog.text


@pytest.mark.asyncio
async def test_notice_from_other_sender_ignored(conn, writer):
    disp = IRCDispatcher({})
    await disp.handle_line(
        conn, ":mallory!m@host NOTICE bot :This nickname is registered"
    )
    assert writer.lines == []
    assert not conn.config.nick_password.consumed


@pytest.mark.asyncio
async def test_acc_notice_delivered_to_rendezvous(conn):
    disp = IRCDispatcher({})
    slot = conn.rendezvous.open("alice")
    await disp.handle_line(conn, ":NickServ!NickServ@services. NOTICE bot :alice ACC 3")
    assert slot.get_nowait() == 3
