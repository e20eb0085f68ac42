"""Test doubles shared by the transport, service and CLI tests."""

from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from src.cli.models import SessionSettings
from src.core.exceptions import TransportIOError, TransportOpenError
from src.services.peer_service import PeerService
from src.tictactoe.document import decode, encode
from src.tictactoe.players import MoveSource, RandomMoveSource
from src.tictactoe.state import GameState
from src.transport.framing import FramedChannel


@dataclass
class FakeHandle:
    address: str
    speed: int
    closed: bool = False


@dataclass
class FakeTransport:
    """
    In-memory Transport.

    * `responder` is called with every written message (as text) and may return the reply text to be read back.
    * `chunks` are bytes waiting to be read before anything is written.
    * reads return b"" when nothing is pending (like a serial read that timed out).
    """

    responder: Optional[Callable[[str], Optional[str]]] = None
    chunks: Iterable[bytes] = ()
    fail_open: bool = False
    fail_read: bool = False
    written: list[bytes] = field(default_factory=list)
    handles: list[FakeHandle] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.pending: deque[bytes] = deque(self.chunks)

    def open(self, address: str, speed: int) -> FakeHandle:
        if self.fail_open:
            raise TransportOpenError(f"Error opening port {address!r}")
        handle = FakeHandle(address, int(speed))
        self.handles.append(handle)
        return handle

    def write(self, handle: FakeHandle, data: bytes) -> None:
        assert not handle.closed, "write on a closed handle"
        self.written.append(data)
        if self.responder is not None:
            reply = self.responder(data.decode())
            if reply is not None:
                self.pending.append(reply.encode())

    def read(self, handle: FakeHandle) -> bytes:
        assert not handle.closed, "read on a closed handle"
        if self.fail_read:
            raise TransportIOError("device unplugged")
        return self.pending.popleft() if self.pending else b""

    def close(self, handle: FakeHandle) -> None:
        handle.closed = True

    @property
    def written_text(self) -> list[str]:
        return [data.decode() for data in self.written]

    @property
    def all_closed(self) -> bool:
        return all(handle.closed for handle in self.handles)


class ScriptedMoveSource:
    """Plays the given moves in order and remembers for which states it was asked."""

    def __init__(self, moves: Iterable[int]) -> None:
        self.moves = deque(moves)
        self.asked: list[GameState] = []

    def next_move(self, state: GameState) -> int:
        self.asked.append(state)
        return self.moves.popleft()


class FirstEmptyMoveSource:
    """Always plays the lowest numbered empty cell."""

    def next_move(self, state: GameState) -> int:
        return state.board.empty_moves()[0]


def peer_responder(
    settings: SessionSettings, move_source: Optional[MoveSource] = None
) -> Callable[[str], str]:
    """Answer documents like the real answering endpoint does (without any I/O)."""
    peer = PeerService(
        FramedChannel(FakeTransport()), settings, move_source or RandomMoveSource()
    )

    def _respond(document: str) -> str:
        peer.state = peer.respond(decode(document, defaults=peer.state))
        return encode(peer.state)

    return _respond


class TickingClock:
    """Clock for timeout tests: every call advances one second."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        self.now += 1.0
        return self.now
