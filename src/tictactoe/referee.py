"""Win / draw detection. Used by the answering endpoint, and by the client only to cross-check what the peer reports."""

from typing import Optional

from src.core.shared_types import Cell, Marker, Status
from src.tictactoe.board import Board
from src.tictactoe.square import Square

# All possible winning lines, as (row, col) squares
WINNING_LINES: tuple[tuple[Square, Square, Square], ...] = (
    # rows
    (Square(0, 0), Square(0, 1), Square(0, 2)),
    (Square(1, 0), Square(1, 1), Square(1, 2)),
    (Square(2, 0), Square(2, 1), Square(2, 2)),
    # columns
    (Square(0, 0), Square(1, 0), Square(2, 0)),
    (Square(0, 1), Square(1, 1), Square(2, 1)),
    (Square(0, 2), Square(1, 2), Square(2, 2)),
    # diagonals
    (Square(0, 0), Square(1, 1), Square(2, 2)),
    (Square(0, 2), Square(1, 1), Square(2, 0)),
)


def winner(board: Board) -> Optional[Marker]:
    for line in WINNING_LINES:
        cells = {board.cell(square) for square in line}
        if len(cells) == 1 and Cell.EMPTY not in cells:
            return Marker(cells.pop().value)
    return None


def evaluate(board: Board) -> Status:
    """Status a board deserves on its own: a win, a draw (full board, no line) or the game goes on."""
    marker = winner(board)
    if marker is not None:
        return Status.win_for(marker)
    if board.is_full():
        return Status.DRAW
    return Status.NEXT_MOVE


def winning_moves(board: Board, marker: Marker) -> list[int]:
    """Empty cells that would complete a line for `marker`."""
    return [
        move
        for move in board.empty_moves()
        if winner(board.apply_move(move, marker)[0]) == marker
    ]
