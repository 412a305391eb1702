"""Root logger setup and failure bookkeeping for fossbot.

``LoggerConfigurator`` installs the colorlog formatter once at startup.
``log_structured_error`` is the single sink for failures reported through
``errors.handling.log_error``; it logs one line per failure and counts it
per category so the session can close with a tally.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import defaultdict
from typing import Any

import colorlog

# Per-category history kept for the exit tally.
MAX_FAILURES_PER_CATEGORY = 200


class ErrorAggregator:
    """Failure history per category (network, channel, config, ...)."""

    def __init__(self):
        self.errors: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.lock = threading.Lock()
        self.start_time = time.time()

    def record_error(
        self, error_type: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        with self.lock:
            history = self.errors[error_type]
            history.append(
                {"timestamp": time.time(), "message": message, "context": context or {}}
            )
            del history[:-MAX_FAILURES_PER_CATEGORY]

    def get_error_summary(self) -> dict[str, Any]:
        """Count, hourly rate and most recent message for every category."""
        with self.lock:
            hours = max((time.time() - self.start_time) / 3600, 1)
            return {
                category: {
                    "total_count": len(history),
                    "rate_per_hour": len(history) / hours,
                    "last_message": history[-1]["message"] if history else None,
                }
                for category, history in self.errors.items()
            }

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("Session ended without recorded failures")
            return
        logging.warning(f"Session failures by category ({len(summary)}):")
        for category, stats in sorted(summary.items()):
            logging.warning(
                f"  {category}: {stats['total_count']} "
                f"({stats['rate_per_hour']:.1f}/hour), last: {stats['last_message']}"
            )


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log a categorised failure and record it for the exit tally.

    The line reads ``[CATEGORY] message | Exception: ... | Context: k=v``.
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + ", ".join(f"{k}={v}" for k, v in context.items()))

    logging.log(level, " | ".join(parts))
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Colored stderr logging for the bot process.

    The level comes from the ``DEBUG`` environment variable ('true', '1' or
    'yes' selects DEBUG). Raw IRC traffic is governed separately by the
    ``verbose`` config flag.
    """

    def __init__(self, config=None):
        self.config = config or {}

    def log_level(self) -> int:
        if os.environ.get("DEBUG", "").lower() in ("true", "1", "yes"):
            return logging.DEBUG
        return logging.INFO

    def configure(self):
        log_level = self.log_level()

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            colorlog.ColoredFormatter(
                "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s "
                "%(threadName)s %(message_log_color)s%(message)s",
                datefmt="%H:%M:%S",
                log_colors={
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "magenta",
                },
                secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
            )
        )

        logging.basicConfig(level=log_level, handlers=[handler], force=True)
        logging.getLogger("fossbot").setLevel(log_level)
        logging.getLogger("aiohttp").setLevel(logging.INFO)

        atexit.register(error_aggregator.log_summary_report)
        return handler
