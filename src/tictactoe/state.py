"""
The unit of exchange between the two endpoints.
"""

from dataclasses import dataclass, replace
from typing import Self

from src.core.exceptions import GameStateError, MoveRejectedError
from src.core.shared_types import GameMode, Marker, Status
from src.tictactoe.board import Board
from src.tictactoe.square import validate_move


@dataclass(frozen=True)
class GameState:
    """
    Everything that travels in one state document.
    ----

    * first_player: the marker whose move is next. Whoever applies a move flips it before the state leaves that side.
    * mode: fixed for the whole session.
    * board: the 3x3 grid.
    * status: Start for a new session, NextMove while playing, Win X / Win O / Draw once finished.

    Frozen: every turn produces a new GameState.
    """

    first_player: Marker
    mode: GameMode
    board: Board
    status: Status

    @classmethod
    def new_session(cls, first_player: Marker, mode: GameMode) -> Self:
        return cls(
            first_player=first_player,
            mode=mode,
            board=Board.empty(),
            status=Status.START,
        )

    @property
    def is_finished(self) -> bool:
        return self.status.is_terminal

    def play(self, move: int) -> Self:
        """
        Let `first_player` claim the cell behind `move` and hand the turn to the opponent.

        Raises OutOfRangeMoveError / MoveRejectedError when the move cannot be played. The state itself is never modified.
        """
        if self.is_finished:
            raise GameStateError(f"Game is over. status: {self.status}")

        validate_move(move)
        new_board, accepted = self.board.apply_move(move, self.first_player)
        if not accepted:
            raise MoveRejectedError(f"Cell {move} is already occupied!")

        return replace(
            self, board=new_board, first_player=self.first_player.opponent()
        )

    def with_status(self, status: Status) -> Self:
        return replace(self, status=status)
