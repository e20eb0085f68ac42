"""Unit tests for src/transport/framing.py"""

import logging

import pytest

from src.core.exceptions import FramingError, ReceiveTimeoutError, TransportIOError
from src.transport.framing import FramedChannel
from tests.fakes import FakeTransport, TickingClock


# -- SEND --
def test_send_writes_message_verbatim() -> None:
    transport = FakeTransport()
    channel = FramedChannel(transport)
    message = "<GameState><Player>X</Player></GameState>\n"

    with channel.connection("COM3", 9600) as handle:
        channel.send(handle, message)

    assert transport.written == [message.encode()]


@pytest.mark.parametrize("message", ["", "no terminator", "\nterminator first"])
def test_send_requires_terminator(message: str) -> None:
    transport = FakeTransport()
    channel = FramedChannel(transport)

    with channel.connection("COM3", 9600) as handle:
        with pytest.raises(FramingError):
            channel.send(handle, message)
    assert transport.written == []


# -- RECEIVE --
@pytest.mark.parametrize(
    "chunks, expected",
    [
        ([b"hello\n"], "hello\n"),
        ([b"he", b"", b"llo", b"\n"], "hello\n"),  # partial reads and empty reads in between
        ([b"<GameState>", b"<Player>O</Player>", b"</GameState>\n"], "<GameState><Player>O</Player></GameState>\n"),
        ([b"\n"], "\n"),
    ],
)
def test_receive_accumulates_until_terminator(chunks: list[bytes], expected: str) -> None:
    channel = FramedChannel(FakeTransport(chunks=chunks))
    with channel.connection("COM3", 9600) as handle:
        assert channel.receive(handle, timeout=5.0) == expected


def test_receive_drops_bytes_after_terminator(caplog: pytest.LogCaptureFixture) -> None:
    transport = FakeTransport(chunks=[b"first\nsecond", b"\n"])
    channel = FramedChannel(transport)

    with caplog.at_level(logging.DEBUG, logger="src.transport.framing"):
        with channel.connection("COM3", 9600) as handle:
            assert channel.receive(handle) == "first\n"

    assert any("Dropping 6 byte(s)" in record.getMessage() for record in caplog.records)
    # the rest of the chunk is gone, the next read starts with the following chunk
    assert list(transport.pending) == [b"\n"]


def test_receive_without_timeout_waits_for_data() -> None:
    """None means unbounded: many empty reads are fine as long as the line eventually arrives."""
    chunks = [b""] * 50 + [b"late\n"]
    channel = FramedChannel(FakeTransport(chunks=chunks), clock=TickingClock())
    with channel.connection("COM3", 9600) as handle:
        assert channel.receive(handle, timeout=None) == "late\n"


def test_receive_times_out() -> None:
    channel = FramedChannel(FakeTransport(chunks=[b"partial"]), clock=TickingClock())
    with channel.connection("COM3", 9600) as handle:
        with pytest.raises(ReceiveTimeoutError, match="7 byte"):
            channel.receive(handle, timeout=3.0)


def test_receive_decodes_invalid_bytes_with_replacement() -> None:
    channel = FramedChannel(FakeTransport(chunks=[b"X\xff\n"]))
    with channel.connection("COM3", 9600) as handle:
        assert channel.receive(handle) == "X\ufffd\n"


def test_transport_error_propagates() -> None:
    transport = FakeTransport(fail_read=True)
    channel = FramedChannel(transport)

    with pytest.raises(TransportIOError):
        with channel.connection("COM3", 9600) as handle:
            channel.receive(handle, timeout=1.0)
    assert transport.all_closed


# -- CONNECTION --
def test_connection_opens_with_address_and_speed() -> None:
    transport = FakeTransport()
    channel = FramedChannel(transport)

    with channel.connection("/dev/ttyUSB0", 115200) as handle:
        assert not handle.closed
        assert (handle.address, handle.speed) == ("/dev/ttyUSB0", 115200)
    assert handle.closed


def test_connection_closes_handle_when_block_raises() -> None:
    transport = FakeTransport()
    channel = FramedChannel(transport)

    with pytest.raises(RuntimeError):
        with channel.connection("COM3", 9600):
            raise RuntimeError("boom")
    assert len(transport.handles) == 1
    assert transport.all_closed
