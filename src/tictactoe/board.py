"""The Game board: a fixed 3x3 grid of cells. Claims cells, nothing more (win/draw is decided elsewhere)."""

from dataclasses import dataclass
from typing import Self

from src.core.shared_types import Cell, Marker
from src.tictactoe.square import BOARD_SIZE, Square

Row = tuple[Cell, ...]

HINT_ROWS = ("123", "456", "789")


@dataclass(frozen=True)
class Board:
    cells: tuple[Row, ...]

    def __post_init__(self) -> None:
        # the grid never changes shape
        if len(self.cells) != BOARD_SIZE or any(
            len(row) != BOARD_SIZE for row in self.cells
        ):
            raise ValueError(f"Board must be {BOARD_SIZE}x{BOARD_SIZE}, got {self.cells!r}")

    @classmethod
    def empty(cls) -> Self:
        return cls(tuple((Cell.EMPTY,) * BOARD_SIZE for _ in range(BOARD_SIZE)))

    @classmethod
    def from_rows(cls, rows: list[str] | tuple[str, ...]) -> Self:
        """Construct a board from one string per row, using the wire characters.

        ex) ["X__", "_O_", "___"] has an X in the top-left corner and an O in the center.
        """
        return cls(tuple(tuple(Cell(character) for character in row) for row in rows))

    def to_rows(self) -> list[str]:
        return ["".join(cell.value for cell in row) for row in self.cells]

    def cell(self, square: Square) -> Cell:
        return self.cells[square.row][square.col]

    def apply_move(self, move: int, marker: Marker) -> tuple[Self, bool]:
        """
        Claim the cell behind `move` (1-9) for `marker`.
        ----

        Returns the new board and whether the move was accepted. An occupied cell leaves the board unchanged.
        NOTE: the range of `move` is validated by the caller (see square.validate_move).
        """
        target = Square.from_move(move)
        if self.cell(target) != Cell.EMPTY:
            return self, False

        new_cells = tuple(
            tuple(
                Cell.of(marker) if Square(row_idx, col_idx) == target else cell
                for col_idx, cell in enumerate(row)
            )
            for row_idx, row in enumerate(self.cells)
        )
        return type(self)(new_cells), True

    def empty_moves(self) -> list[int]:
        return [
            Square(row, col).to_move()
            for row in range(BOARD_SIZE)
            for col in range(BOARD_SIZE)
            if self.cells[row][col] == Cell.EMPTY
        ]

    def is_full(self) -> bool:
        return not self.empty_moves()

    def render(self) -> str:
        """Human-readable grid for the console."""
        return _render_rows([[cell.value for cell in row] for row in self.cells])

    @staticmethod
    def hint() -> str:
        """The numbering of the cells, shown to players before they type their move."""
        return _render_rows([list(row) for row in HINT_ROWS])


def _render_rows(rows: list[list[str]]) -> str:
    lines: list[str] = []
    for idx, row in enumerate(rows):
        lines.append("|".join(f" {character} " for character in row))
        if idx < len(rows) - 1:
            lines.append("-----------")
    return "\n".join(lines)
