"""Bot command handlers.

Each handler runs on its own thread with a snapshot of the connection and a
ParsedMessage whose ``target`` is the reply address and ``payload`` the
command arguments. Bad arguments are ignored without a reply.
"""

from __future__ import annotations

import logging
import random
import re
import time

import aiohttp

from ..constants import (
    DEFAULT_PING_COUNT,
    MAX_COMMITS,
    MAX_PING_COUNT,
    QUOTE_LINE_DELAY,
    TRACEROUTE_MAX_HOPS,
)
from ..errors.internal import InternalError
from ..irc.connection import Connection
from ..irc.models import ParsedMessage
from ..irc.parser import is_channel
from ..logs.logger import logger
from .formatting import RESET, IRCColors, colorize
from .github import GitHubAPI
from .registry import CommandRegistry, requires_identified
from .shell import relay_tool_output

# Multi-line quotes are sent one line at a time.
QUOTES: tuple[tuple[str, ...], ...] = (
    (
        colorize("I mpala einai strogili", IRCColors.TEAL),
        colorize("to gipedo einai paralilogramo", IRCColors.TEAL),
        colorize("11 autoi, 11 emeis sinolo 23", IRCColors.TEAL),
        colorize("kai tha boun kai 3 allages apo kathe omada sinolo 29!", IRCColors.TEAL),
    ),
    (colorize("fail indeed", IRCColors.LTCYAN),),
    (colorize("total", IRCColors.PINK), colorize("failure", IRCColors.PINK)),
    (
        colorize("popo, ti eipes twra", IRCColors.LTGREEN),
        colorize("emeina me anoixto to... ", IRCColors.LTGREEN)
        + colorize("programma", IRCColors.RED),
    ),
)

COMMAND_SUMMARY = "list / help, fail, github, ping, traceroute, dns"

_HOST_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.:-]*$")
_REPO_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def extract_params(payload: str) -> list[str]:
    return payload.split()


def clamp_count(raw: str, default: int, maximum: int) -> int:
    try:
        value = int(raw)
    except ValueError:
        return default
    if value > maximum:
        return maximum
    if value < 1:
        return 1
    return value


def _host_family(host: str) -> str | None:
    """'4' for dotted hosts, '6' for colon addresses, None otherwise."""
    if not _HOST_RE.match(host):
        return None
    if "." in host:
        return "4"
    if ":" in host:
        return "6"
    return None


def list_commands(conn: Connection, msg: ParsedMessage) -> None:
    conn.send_message(msg.target, COMMAND_SUMMARY)


def fail(conn: Connection, msg: ParsedMessage) -> None:
    quote = random.choice(QUOTES)
    for i, line in enumerate(quote):
        if i:
            time.sleep(QUOTE_LINE_DELAY)
        conn.send_message(msg.target, line)


def ping(conn: Connection, msg: ParsedMessage) -> None:
    argv = extract_params(msg.payload)
    if len(argv) not in (1, 2):
        return
    family = _host_family(argv[0])
    if family is None:
        return
    count = DEFAULT_PING_COUNT
    if len(argv) == 2:
        count = clamp_count(argv[1], DEFAULT_PING_COUNT, MAX_PING_COUNT)
    tool = "ping" if family == "4" else "ping6"
    relay_tool_output(conn, msg.target, [tool, "-c", str(count), argv[0]])


def traceroute(conn: Connection, msg: ParsedMessage) -> None:
    argv = extract_params(msg.payload)
    if len(argv) != 1:
        return
    family = _host_family(argv[0])
    if family is None:
        return
    tool = "traceroute" if family == "4" else "traceroute6"
    if is_channel(msg.target):
        conn.send_message(msg.target, f"Printing results privately to {msg.sender}")
    relay_tool_output(conn, msg.sender, [tool, "-m", str(TRACEROUTE_MAX_HOPS), argv[0]])


def dns(conn: Connection, msg: ParsedMessage) -> None:
    argv = extract_params(msg.payload)
    if len(argv) != 1 or _host_family(argv[0]) != "4":
        return
    relay_tool_output(conn, msg.target, ["nslookup", argv[0]])


async def github(conn: Connection, msg: ParsedMessage) -> None:
    argv = extract_params(msg.payload)
    if len(argv) not in (1, 2) or not _REPO_RE.match(argv[0]):
        return
    count = 1
    if len(argv) == 2:
        count = clamp_count(argv[1], 1, MAX_COMMITS)

    token = conn.config.github_token
    async with aiohttp.ClientSession() as session:
        api = GitHubAPI(session, token.get_secret_value() if token else None)
        try:
            commits = await api.fetch_commits(argv[0], count)
        except InternalError as e:
            logger.log_event(
                "bot", "github_failed", level=logging.WARNING, repo=argv[0], error=str(e)
            )
            return

    for commit in commits:
        conn.send_message(
            msg.target,
            f"{colorize(f'[{commit.sha}]', IRCColors.PURPLE)}{RESET} {commit.message}"
            f"{colorize(f' --{commit.author}', IRCColors.ORANGE)}"
            f"{colorize(f' - {commit.url}', IRCColors.LTBLUE)}",
        )


def build_registry() -> CommandRegistry:
    """Register the built-in commands and freeze the registry."""
    registry = CommandRegistry()
    registry.add("list", list_commands)
    registry.add("help", list_commands)
    registry.add("fail", fail)
    registry.add("ping", ping)
    registry.add("traceroute", requires_identified(traceroute))
    registry.add("dns", dns)
    registry.add("github", github)
    return registry.freeze()
