"""
Message boundaries on top of a Transport: a message ends with a newline.

The two endpoints take turns (half-duplex): one side sends a full line, then blocks until the other side answers
with a full line. Documents never contain the terminator themselves.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from src.core.exceptions import FramingError, ReceiveTimeoutError
from src.transport.serial_port import Transport

logger = logging.getLogger(__name__)

TERMINATOR = b"\n"
ENCODING = "utf-8"


class FramedChannel:
    def __init__(
        self,
        transport: Transport,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.transport = transport
        self.clock = clock

    def open(self, address: str, speed: int) -> Any:
        return self.transport.open(address, speed)

    def close(self, handle: Any) -> None:
        self.transport.close(handle)

    @contextmanager
    def connection(self, address: str, speed: int) -> Iterator[Any]:
        """Open a handle for the duration of the block. Always closed, also when the block raises."""
        handle = self.open(address, speed)
        try:
            yield handle
        finally:
            self.close(handle)

    def send(self, handle: Any, message: str) -> None:
        """Write the message verbatim. It must already end with the terminator."""
        data = message.encode(ENCODING)
        if not data.endswith(TERMINATOR):
            raise FramingError(f"Message must end with {TERMINATOR!r}: {message!r}")
        logger.debug("-> %s", message.rstrip())
        self.transport.write(handle, data)

    def receive(self, handle: Any, timeout: Optional[float] = None) -> str:
        """
        Block until a complete line has arrived.
        ----

        Reads are accumulated until the buffer holds a terminator. Returns everything up to and including the
        first terminator. Bytes after it are dropped (the peer must wait for our next message before it talks again).

        `timeout` bounds the whole wait in seconds. None waits forever, which is only bounded by the transport
        reporting an error. ReceiveTimeoutError is raised once the time is up.
        """
        deadline = None if timeout is None else self.clock() + timeout
        buffer = bytearray()
        while True:
            chunk = self.transport.read(handle)
            if chunk:
                buffer.extend(chunk)
                end = buffer.find(TERMINATOR)
                if end != -1:
                    message, rest = bytes(buffer[: end + 1]), bytes(buffer[end + 1 :])
                    if rest:
                        logger.debug("Dropping %d byte(s) after terminator: %r", len(rest), rest)
                    text = message.decode(ENCODING, errors="replace")
                    logger.debug("<- %s", text.rstrip())
                    return text

            if deadline is not None and self.clock() >= deadline:
                raise ReceiveTimeoutError(
                    f"No complete message within {timeout} s ({len(buffer)} byte(s) received)."
                )
