"""
Client side of a session: one round = (move) -> send document -> wait for the reply -> decode -> (move).

The peer is the authority on the status it sends back. This side only checks the reported status against its own
reading of the board and logs a warning when the two disagree.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional
from uuid import UUID, uuid4

from src.cli.models import SessionSettings
from src.core.exceptions import GameStateError, MoveRejectedError
from src.core.models import RoundRecord
from src.core.shared_types import Status
from src.db.repository import DocumentRepository
from src.tictactoe import referee
from src.tictactoe.document import decode, encode
from src.tictactoe.players import MoveSource
from src.tictactoe.state import GameState
from src.transport.framing import FramedChannel

logger = logging.getLogger(__name__)

# Start -> NextMove -> {NextMove | Win X | Win O | Draw}. Terminal statuses have no way out.
ALLOWED_TRANSITIONS: dict[Status, frozenset[Status]] = {
    Status.START: frozenset(Status),
    Status.NEXT_MOVE: frozenset(
        {Status.NEXT_MOVE, Status.WIN_X, Status.WIN_O, Status.DRAW}
    ),
    Status.WIN_X: frozenset(),
    Status.WIN_O: frozenset(),
    Status.DRAW: frozenset(),
}


@dataclass(frozen=True)
class RoundResult:
    """
    Outcome of a single round.

    accepted is False when the local move was rejected: nothing was sent and the session did not advance.
    """

    round_number: int
    accepted: bool
    state: GameState
    sent_document: Optional[str] = None
    received_document: Optional[str] = None
    rejection: Optional[str] = None


class TurnExchange:
    """Drives one session from Start to a terminal status."""

    def __init__(
        self,
        channel: FramedChannel,
        settings: SessionSettings,
        move_source: MoveSource,
        repository: Optional[DocumentRepository] = None,
        on_state: Optional[Callable[[GameState], None]] = None,
        on_rejected: Optional[Callable[[MoveRejectedError], None]] = None,
        session_id: Optional[UUID] = None,
    ) -> None:
        self.channel = channel
        self.settings = settings
        self.move_source = move_source
        self.repository = repository
        self.on_state = on_state
        self.on_rejected = on_rejected
        self.session_id = session_id or uuid4()

        self.state = GameState.new_session(settings.first_player, settings.mode)
        self.rounds_played = 0

    @property
    def status(self) -> Status:
        return self.state.status

    def run(self) -> Status:
        """Play rounds until the peer reports a terminal status."""
        while not self.state.is_finished:
            self.play_round()
        logger.info(
            "Session %s finished after %d round(s): %s",
            self.session_id,
            self.rounds_played,
            self.state.status,
        )
        return self.state.status

    def play_round(self) -> RoundResult:
        """
        One send/receive cycle.
        ----

        1. open a fresh handle
        2. local move first (Man vs Man, Man vs AI). A rejected move ends the round without any I/O.
        3. send the document
        4. wait for the reply, decode it on top of what was just sent
        5. close the handle (also on errors)
        6. advance the status
        7. local move after the reply (AI vs Man). It travels with the next round.

        Transport errors propagate: they end the session.
        """
        if self.state.is_finished:
            raise GameStateError(
                f"Session is over, no more rounds. status: {self.state.status}"
            )

        round_number = self.rounds_played + 1
        with self.channel.connection(self.settings.port, self.settings.baud_rate) as handle:
            to_send = self.state
            if self.state.mode.local_moves_before_send:
                try:
                    to_send = self._local_move(self.state)
                except MoveRejectedError as error:
                    self._reject(error)
                    return RoundResult(
                        round_number=round_number,
                        accepted=False,
                        state=self.state,
                        rejection=str(error),
                    )
                self._publish(to_send)

            sent_document = encode(to_send)
            self.channel.send(handle, sent_document)
            received_document = self.channel.receive(
                handle, timeout=self.settings.receive_timeout
            )

        reply = decode(received_document, defaults=to_send)
        self.state = self._advance(to_send, reply)
        self.rounds_played = round_number
        self._record(round_number, sent_document, received_document)
        self._publish(self.state)

        if self.state.mode.local_moves_after_receive and not self.state.is_finished:
            self.state = self._solicit_until_accepted(self.state)
            self._publish(self.state)

        return RoundResult(
            round_number=round_number,
            accepted=True,
            state=self.state,
            sent_document=sent_document,
            received_document=received_document,
        )

    # -- Internal helpers --
    def _local_move(self, state: GameState) -> GameState:
        move = self.move_source.next_move(state)
        return state.play(move)

    def _solicit_until_accepted(self, state: GameState) -> GameState:
        while True:
            try:
                return self._local_move(state)
            except MoveRejectedError as error:
                self._reject(error)

    def _reject(self, error: MoveRejectedError) -> None:
        logger.info("Move rejected: %s", error)
        if self.on_rejected is not None:
            self.on_rejected(error)

    def _advance(self, sent: GameState, reply: GameState) -> GameState:
        """Apply the session rules to the decoded reply: the mode never changes, the status only moves forward."""
        if reply.mode != sent.mode:
            logger.warning(
                "Peer reported game type %r, session is %r. Keeping %r.",
                reply.mode.value,
                sent.mode.value,
                sent.mode.value,
            )
            reply = replace(reply, mode=sent.mode)

        if reply.status not in ALLOWED_TRANSITIONS[sent.status]:
            logger.warning(
                "Ignoring status %r reported by peer after %r.",
                reply.status.value,
                sent.status.value,
            )
            reply = reply.with_status(sent.status)

        if reply.status != Status.START:
            expected = referee.evaluate(reply.board)
            if expected != reply.status:
                logger.warning(
                    "Peer reported %r but the board reads as %r.",
                    reply.status.value,
                    expected.value,
                )
        return reply

    def _record(self, round_number: int, sent: str, received: str) -> None:
        if self.repository is None:
            return
        self.repository.add_round(
            RoundRecord(
                session_id=self.session_id,
                round_number=round_number,
                sent_document=sent,
                received_document=received,
                status=self.state.status.value,
            )
        )

    def _publish(self, state: GameState) -> None:
        if self.on_state is not None:
            self.on_state(state)
