from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import aiohttp
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import (
    DEFAULT_MAX_RETRY_ATTEMPTS,
    RETRY_BACKOFF_MULTIPLIER,
    RETRY_MAX_BACKOFF_SECONDS,
)
from ..logging_config import log_structured_error
from .internal import (
    ChannelLimitError,
    ConfigError,
    ConnectionLostError,
    InternalError,
    NetworkError,
    ParsingError,
)

T = TypeVar("T")


def log_error(message: str, error: Exception, context: dict | None = None) -> None:
    """Logs an error message with the associated exception details.

    The error category is derived from the exception type so the aggregator
    can report patterns (network, channel, config, ...).

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = "unknown"
    if isinstance(error, ConnectionLostError):
        error_type = "connection"
    elif isinstance(error, NetworkError | OSError | ConnectionError):
        error_type = "network"
    elif isinstance(error, ChannelLimitError):
        error_type = "channel"
    elif isinstance(error, ConfigError):
        error_type = "config"
    elif isinstance(error, ParsingError):
        error_type = "parsing"
    elif isinstance(error, InternalError):
        error_type = "internal"

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )


async def handle_api_error(operation: Callable[[], Awaitable[T]], context: str) -> T:
    """Run an HTTP API operation and translate failures into internal errors.

    Args:
        operation: The async API operation to execute.
        context: Descriptive context for the operation (e.g., "GitHub commits").

    Returns:
        The result of the operation if successful.

    Raises:
        NetworkError: Connectivity problems (retryable).
        ParsingError: Client errors or undecodable payloads.
        InternalError: Anything else.
    """
    try:
        return await operation()
    except (aiohttp.ClientError, ValueError, OSError) as e:
        error_context: dict[str, object] = {"operation": context}
        status = getattr(e, "status", None)
        if status is not None:
            error_context["http_status"] = status

        log_error(f"API operation failed in {context}", e, context=error_context)

        if isinstance(e, aiohttp.ClientResponseError):
            if 400 <= e.status < 500:
                raise ParsingError(
                    f"Client error in {context} (HTTP {e.status})",
                    data=error_context,
                ) from e
            raise NetworkError(
                f"Server error in {context} (HTTP {e.status})", data=error_context
            ) from e
        if isinstance(e, aiohttp.ClientError | OSError):
            raise NetworkError(
                f"Network connectivity issue in {context}: {str(e)}",
                data=error_context,
            ) from e
        raise ParsingError(
            f"Unexpected payload in {context}: {str(e)}", data=error_context
        ) from e


async def handle_retryable_error(
    operation: Callable[[], Awaitable[T]],
    context: str,
    max_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS,
) -> T:
    """Run an operation with Tenacity-based retry on network errors.

    Args:
        operation: Async callable to run.
        context: Descriptive context for the operation.
        max_attempts: Maximum number of attempts.

    Returns:
        The result if successful.

    Raises:
        InternalError: If retries are exhausted or a non-retryable error occurs.
    """

    def before_retry(retry_state):
        if retry_state.attempt_number > 1:
            logging.info(f"Retrying {context} (attempt {retry_state.attempt_number})")

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=RETRY_BACKOFF_MULTIPLIER, max=RETRY_MAX_BACKOFF_SECONDS
        ),
        retry=retry_if_exception_type(NetworkError),
        before=before_retry,
        reraise=False,
    )

    try:
        return await retrying(handle_api_error, operation, context)
    except RetryError as e:
        last = e.last_attempt.exception()
        raise InternalError(
            f"Operation failed after {max_attempts} attempts in {context}: {last}",
            data={"operation": context, "max_attempts": max_attempts},
        ) from last
