"""
Move sources. The turn exchange does not care who picks a move, a person at the console or an automated player:
both just answer `next_move(state)` with a number 1-9.
"""

import random
from typing import Callable, Optional, Protocol

from src.core.exceptions import QuitRequested
from src.tictactoe import referee
from src.tictactoe.square import parse_move
from src.tictactoe.state import GameState

QUIT_WORDS = {"q", "quit", "exit"}


class MoveSource(Protocol):
    def next_move(self, state: GameState) -> int:
        """Pick a move for `state.first_player`."""
        ...


class ConsoleMoveSource:
    """Ask the player at the keyboard."""

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self.read = read
        self.write = write

    def next_move(self, state: GameState) -> int:
        """Raises OutOfRangeMoveError for anything that is not 1-9, QuitRequested when the player wants to leave."""
        answer = self.read(
            f"      Please, {state.first_player} enter your move (1-9): "
        )
        if answer.strip().lower() in QUIT_WORDS:
            raise QuitRequested("Player left the game.")
        return parse_move(answer)


class RandomMoveSource:
    """
    Automated player.
    ----

    1. complete an own line if possible
    2. otherwise block a line of the opponent
    3. otherwise any empty cell
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def next_move(self, state: GameState) -> int:
        board = state.board
        marker = state.first_player

        for candidates in (
            referee.winning_moves(board, marker),
            referee.winning_moves(board, marker.opponent()),
            board.empty_moves(),
        ):
            if candidates:
                return self.rng.choice(candidates)

        raise ValueError("No empty cell left to play.")
