"""
A cell position on the board, and the conversion from the 1-based move numbers typed by the players.

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.exceptions import OutOfRangeMoveError

BOARD_SIZE = 3
FIRST_MOVE = 1
LAST_MOVE = BOARD_SIZE * BOARD_SIZE


@dataclass(frozen=True)
class Square:
    row: int
    col: int

    @classmethod
    def from_move(cls, move: int) -> Square:
        """Move numbers 1-9 read row-major: 1 is the top-left cell, 9 the bottom-right."""
        return cls((move - 1) // BOARD_SIZE, (move - 1) % BOARD_SIZE)

    def to_move(self) -> int:
        return self.row * BOARD_SIZE + self.col + 1


def validate_move(move: int) -> int:
    """The board does not check the range itself, so every move must pass through here first."""
    if not (FIRST_MOVE <= move <= LAST_MOVE):
        raise OutOfRangeMoveError(
            f"Move {move} is outside the board. Pick a cell {FIRST_MOVE}-{LAST_MOVE}."
        )
    return move


def parse_move(text: str) -> int:
    """Interpret what a player typed as a move number."""
    try:
        move = int(text.strip())
    except ValueError:
        raise OutOfRangeMoveError(f"Cannot interpret {text!r} as a move number.")
    return validate_move(move)
