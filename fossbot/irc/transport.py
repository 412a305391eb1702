"""Line framing over the IRC byte stream."""

from __future__ import annotations

import asyncio
import logging

from ..constants import IRC_LINE_MAX, READ_CHUNK_SIZE
from ..errors.internal import ConnectionLostError
from ..logs.logger import logger

CRLF = b"\r\n"


class LineTransport:
    """Turns the stream's byte chunks into CRLF-terminated lines.

    Incomplete tails stay buffered across reads. A tail longer than
    ``max_line`` without a terminator is dropped: lines above the protocol
    limit are an operational limit, not something that gets reassembled.
    """

    def __init__(
        self, reader: asyncio.StreamReader | None, max_line: int = IRC_LINE_MAX
    ) -> None:
        self.reader = reader
        self.max_line = max_line
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet returned as a line."""
        return len(self._buffer)

    def feed(self, data: bytes) -> None:
        self._buffer += data

    def next_line(self) -> str | None:
        """Pop the next complete line, or None if only a partial one is buffered."""
        idx = self._buffer.find(CRLF)
        if idx < 0:
            if len(self._buffer) > self.max_line:
                logger.log_event(
                    "irc",
                    "line_overflow",
                    level=logging.WARNING,
                    size=len(self._buffer),
                    limit=self.max_line,
                )
                self._buffer.clear()
            return None
        raw = bytes(self._buffer[:idx])
        del self._buffer[: idx + len(CRLF)]
        return raw.decode("utf-8", errors="replace")

    async def read_line(self) -> str | None:
        """Return the next line, reading whatever bytes are available.

        Returns None when the bytes read so far do not complete a line; the
        caller simply calls again.

        Raises:
            ConnectionLostError: The stream hit end of file or a socket error.
        """
        line = self.next_line()
        if line is not None:
            return line
        if self.reader is None:
            raise ConnectionLostError("IRC connection has no reader")
        try:
            data = await self.reader.read(READ_CHUNK_SIZE)
        except (ConnectionError, OSError) as e:
            raise ConnectionLostError(f"IRC connection failed: {e}") from e
        if not data:
            raise ConnectionLostError("IRC connection closed")
        self.feed(data)
        return self.next_line()
