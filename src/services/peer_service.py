"""
Answering side of a session (the "server").

Receives a state document, decides the status, plays the automated move when the game type says so and sends
the new document back. This endpoint is the one that detects wins and draws.
"""

import logging
from typing import Callable, Optional

from src.cli.models import SessionSettings
from src.core.shared_types import Status
from src.tictactoe import referee
from src.tictactoe.document import decode, encode
from src.tictactoe.players import MoveSource
from src.tictactoe.state import GameState
from src.transport.framing import FramedChannel

logger = logging.getLogger(__name__)


class PeerService:
    def __init__(
        self,
        channel: FramedChannel,
        settings: SessionSettings,
        move_source: MoveSource,
        on_state: Optional[Callable[[GameState], None]] = None,
    ) -> None:
        self.channel = channel
        self.settings = settings
        self.move_source = move_source
        self.on_state = on_state

        # used as defaults until the first document arrives
        self.state = GameState.new_session(settings.first_player, settings.mode)
        self.documents_answered = 0

    def respond(self, incoming: GameState) -> GameState:
        """
        Compute the reply to a received state.
        ----

        1. a finished game is echoed back unchanged
        2. a board that is already won / full gets its terminal status
        3. otherwise the automated player moves for `first_player` (all game types except Man vs Man)
        4. the board is evaluated again after that move
        """
        if incoming.is_finished:
            return incoming

        status = referee.evaluate(incoming.board)
        if status.is_terminal or not incoming.mode.peer_moves:
            return incoming.with_status(status)

        move = self.move_source.next_move(incoming)
        after_move = incoming.play(move)
        logger.info("%s plays %d", incoming.first_player, move)
        return after_move.with_status(referee.evaluate(after_move.board))

    def answer(self, handle: object) -> GameState:
        """Wait for one document and send the reply on the same handle."""
        received = self.channel.receive(handle, timeout=self.settings.receive_timeout)
        incoming = decode(received, defaults=self.state)
        self.state = self.respond(incoming)
        self.channel.send(handle, encode(self.state))
        self.documents_answered += 1
        if self.on_state is not None:
            self.on_state(self.state)
        return self.state

    def serve(self) -> Status:
        """Keep the port open and answer documents until a terminal status has been sent."""
        with self.channel.connection(self.settings.port, self.settings.baud_rate) as handle:
            while not self.state.is_finished:
                self.answer(handle)
        logger.info(
            "Answered %d document(s), game over: %s",
            self.documents_answered,
            self.state.status,
        )
        return self.state.status
