"""
Type definitions used across layers
"""

from enum import StrEnum


class Marker(StrEnum):
    X = "X"
    O = "O"  # noqa: E741

    def opponent(self) -> "Marker":
        return Marker.O if self == Marker.X else Marker.X


class Cell(StrEnum):
    """Content of a single board cell. Values are the characters used on the wire."""

    EMPTY = "_"
    X = "X"
    O = "O"  # noqa: E741

    @classmethod
    def of(cls, marker: Marker) -> "Cell":
        return cls(marker.value)


class GameMode(StrEnum):
    """Who supplies the moves. First name is the local (client) side, second the peer."""

    MAN_VS_MAN = "Man vs Man"
    MAN_VS_AI = "Man vs AI"
    AI_VS_MAN = "AI vs Man"
    AI_VS_AI = "AI vs AI"

    @property
    def local_moves_before_send(self) -> bool:
        return self in (GameMode.MAN_VS_MAN, GameMode.MAN_VS_AI)

    @property
    def local_moves_after_receive(self) -> bool:
        return self == GameMode.AI_VS_MAN

    @property
    def peer_moves(self) -> bool:
        return self != GameMode.MAN_VS_MAN


class Status(StrEnum):
    START = "Start"
    NEXT_MOVE = "NextMove"
    WIN_X = "Win X"
    WIN_O = "Win O"
    DRAW = "Draw"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @classmethod
    def win_for(cls, marker: Marker) -> "Status":
        return cls.WIN_X if marker == Marker.X else cls.WIN_O


TERMINAL_STATUSES = frozenset({Status.WIN_X, Status.WIN_O, Status.DRAW})
