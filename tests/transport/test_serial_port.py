"""Unit tests for src/transport/serial_port.py (pyserial's loop:// device stands in for real hardware)"""

import pytest

from src.core.exceptions import TransportOpenError
from src.transport.framing import FramedChannel
from src.transport.serial_port import SerialTransport


def test_loopback_echo() -> None:
    transport = SerialTransport(read_timeout=0.01)
    handle = transport.open("loop://", 9600)
    try:
        transport.write(handle, b"ping\n")
        received = b""
        for _ in range(100):
            received += transport.read(handle)
            if received.endswith(b"\n"):
                break
    finally:
        transport.close(handle)

    assert received == b"ping\n"
    assert not handle.is_open


def test_open_applies_line_settings() -> None:
    transport = SerialTransport(read_timeout=0.01)
    handle = transport.open("loop://", 19200)
    try:
        assert handle.baudrate == 19200
        assert handle.bytesize == 8
        assert handle.parity == "N"
        assert handle.stopbits == 1
        assert handle.timeout == 0.01
    finally:
        transport.close(handle)


def test_framed_round_trip_over_loopback() -> None:
    channel = FramedChannel(SerialTransport(read_timeout=0.01))
    with channel.connection("loop://", 9600) as handle:
        channel.send(handle, "<GameState />\n")
        assert channel.receive(handle, timeout=2.0) == "<GameState />\n"


@pytest.mark.parametrize("address", ["/dev/this-port-does-not-exist", "bogus://nowhere"])
def test_open_failure(address: str) -> None:
    with pytest.raises(TransportOpenError, match="Error opening port"):
        SerialTransport().open(address, 9600)
