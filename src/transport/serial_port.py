"""
The byte-stream device between the two endpoints.
----

Transport is the contract the framing layer relies on (can implement later for sockets / pipes etc.).
SerialTransport implements it with pyserial.
"""

import logging
from typing import Any, Protocol

import serial

from src.core.exceptions import TransportIOError, TransportOpenError

logger = logging.getLogger(__name__)

# Per-read timeout of the device. A read returns whatever arrived within this time (possibly nothing).
DEFAULT_READ_TIMEOUT = 0.05
DEFAULT_WRITE_TIMEOUT = 1.0
READ_CHUNK_SIZE = 256


class Transport(Protocol):
    """Byte-stream device orchestration"""

    def open(self, address: str, speed: int) -> Any:
        """Open the device and return a handle. Raises TransportOpenError."""
        ...

    def write(self, handle: Any, data: bytes) -> None:
        """Write all bytes. Raises TransportIOError."""
        ...

    def read(self, handle: Any) -> bytes:
        """Return the bytes available right now (may be fewer than expected, or none). Raises TransportIOError."""
        ...

    def close(self, handle: Any) -> None:
        ...


class SerialTransport:
    """Serial port, 8 data bits, no parity, one stop bit."""

    def __init__(
        self,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    ) -> None:
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout

    def open(self, address: str, speed: int) -> serial.SerialBase:
        """`address` is a device name (COM3, /dev/ttyUSB0) or any pyserial URL (loop://, socket://host:port)."""
        try:
            handle = serial.serial_for_url(
                address,
                baudrate=int(speed),
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.read_timeout,
                write_timeout=self.write_timeout,
            )
        except (serial.SerialException, ValueError) as error:
            raise TransportOpenError(f"Error opening port {address!r}: {error}") from error
        logger.debug("Opened %s at %s bps", address, speed)
        return handle

    def write(self, handle: serial.SerialBase, data: bytes) -> None:
        try:
            handle.write(data)
            handle.flush()
        except serial.SerialException as error:
            raise TransportIOError(f"Error writing to {handle.port!r}: {error}") from error

    def read(self, handle: serial.SerialBase) -> bytes:
        try:
            return handle.read(max(READ_CHUNK_SIZE, handle.in_waiting))
        except serial.SerialException as error:
            raise TransportIOError(f"Error reading from {handle.port!r}: {error}") from error

    def close(self, handle: serial.SerialBase) -> None:
        handle.close()
        logger.debug("Closed %s", handle.port)
