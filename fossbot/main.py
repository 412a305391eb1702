#!/usr/bin/env python3
"""
Main entry point for fossbot
"""

import asyncio
import logging
import sys

from .bot import build_registry
from .config import get_configuration
from .errors.handling import log_error
from .errors.internal import ConnectionLostError
from .irc import IRCClient
from .logging_config import LoggerConfigurator


async def main() -> None:
    """Load the configuration, connect, and run the receive loop until the
    connection drops or the process is interrupted.

    Raises:
        SystemExit: If the configuration is invalid, the connection cannot be
            established, or the connection is lost.
    """
    config = get_configuration()
    client = IRCClient(config, build_registry())

    conn = await client.connect()
    if conn is None:
        logging.error(f"Could not connect to {config.server}:{config.port}")
        sys.exit(1)

    client.register(conn)
    try:
        await client.run(conn)
    except ConnectionLostError as e:
        log_error("IRC connection closed", e)
        sys.exit(1)
    except asyncio.CancelledError:
        await client.quit(conn)
        raise


def run() -> None:
    """Synchronous entry point for the application."""
    LoggerConfigurator().configure()
    logging.info("Starting fossbot")
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(0)
    except asyncio.CancelledError:
        sys.exit(0)
    finally:
        logging.info("Application shutdown complete")


if __name__ == "__main__":
    run()
