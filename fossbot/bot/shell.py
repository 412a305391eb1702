"""Run network diagnostic tools and relay their output."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..constants import COMMAND_OUTPUT_MAX_LINES, COMMAND_TIMEOUT_SECONDS
from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from ..irc.connection import Connection


def run_tool(argv: Sequence[str], timeout: int = COMMAND_TIMEOUT_SECONDS) -> list[str]:
    """Run ``argv`` without a shell and return its non-empty output lines.

    A missing binary or a timeout yields whatever was collected (possibly
    nothing) and is logged.
    """
    try:
        proc = subprocess.run(
            list(argv),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
        output = proc.stdout or proc.stderr
    except FileNotFoundError:
        logger.log_event("bot", "tool_missing", level=logging.ERROR, tool=argv[0])
        return []
    except subprocess.TimeoutExpired as e:
        logger.log_event("bot", "tool_timeout", level=logging.WARNING, tool=argv[0], timeout=timeout)
        output = e.stdout.decode(errors="replace") if isinstance(e.stdout, bytes) else (e.stdout or "")
    return [line.rstrip() for line in output.splitlines() if line.strip()]


def relay_tool_output(conn: Connection, target: str, argv: Sequence[str]) -> int:
    """Send each output line of ``argv`` to ``target``. Returns lines sent."""
    lines = run_tool(argv)[:COMMAND_OUTPUT_MAX_LINES]
    for line in lines:
        conn.send_message(target, line)
    return len(lines)
