"""
State document: the XML text that carries a GameState over the wire.
----

<GameState>
    <Player>X</Player>
    <GameType>Man vs Man</GameType>
    <Board>
        <Row><Cell>X</Cell><Cell>_</Cell><Cell>_</Cell></Row>
        <Row>...</Row>
        <Row>...</Row>
    </Board>
    <Status>NextMove</Status>
</GameState>

On the wire the whole document sits on a single line (no whitespace between tags) and ends with a newline,
which is the message boundary used by the framing layer.

Decoding is forgiving: every field that is missing or cannot be interpreted keeps
the value of the defaults supplied by the caller. Problems are logged, never raised.
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import replace
from typing import Optional

from src.core.exceptions import DocumentParseError
from src.core.shared_types import Cell, GameMode, Marker, Status
from src.tictactoe.board import Board
from src.tictactoe.square import BOARD_SIZE
from src.tictactoe.state import GameState

logger = logging.getLogger(__name__)

TERMINATOR = "\n"

ROOT_TAG = "GameState"
PLAYER_TAG = "Player"
GAME_TYPE_TAG = "GameType"
BOARD_TAG = "Board"
ROW_TAG = "Row"
CELL_TAG = "Cell"
STATUS_TAG = "Status"

# the peer may prefix its reply with an XML declaration
XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


def encode(state: GameState) -> str:
    """Write the state as a single-line, newline-terminated document. Fields always in the same order."""
    root = ET.Element(ROOT_TAG)
    ET.SubElement(root, PLAYER_TAG).text = state.first_player.value
    ET.SubElement(root, GAME_TYPE_TAG).text = state.mode.value
    board_element = ET.SubElement(root, BOARD_TAG)
    for row in state.board.cells:
        row_element = ET.SubElement(board_element, ROW_TAG)
        for cell in row:
            ET.SubElement(row_element, CELL_TAG).text = cell.value
    ET.SubElement(root, STATUS_TAG).text = state.status.value
    return ET.tostring(root, encoding="unicode") + TERMINATOR


def decode(document: Optional[str], defaults: GameState) -> GameState:
    """Parse a received document on top of `defaults`. See read_document."""
    state, problems = read_document(document, defaults)
    for problem in problems:
        logger.warning("Kept previous value while decoding state document: %s", problem)
    return state


def read_document(
    document: Optional[str], defaults: GameState
) -> tuple[GameState, list[DocumentParseError]]:
    """
    Field-level partial update of `defaults` with whatever is valid in `document`.
    ----

    Returns the resulting state and the list of problems found. A document without a recognizable
    <GameState> root returns the defaults untouched together with a single problem.
    """
    try:
        root = _parse_root(document)
    except DocumentParseError as error:
        return defaults, [error]

    problems: list[DocumentParseError] = []
    state = defaults

    readers = (
        (PLAYER_TAG, _read_player, "first_player"),
        (GAME_TYPE_TAG, _read_game_type, "mode"),
        (BOARD_TAG, _read_board, "board"),
        (STATUS_TAG, _read_status, "status"),
    )
    for tag, reader, attribute in readers:
        element = root.find(tag)
        if element is None:
            problems.append(DocumentParseError(f"<{tag}> missing"))
            continue
        try:
            value = reader(element)
        except DocumentParseError as error:
            problems.append(error)
            continue
        state = replace(state, **{attribute: value})

    return state, problems


# -- Internal helpers --
def _parse_root(document: Optional[str]) -> ET.Element:
    if not document or not document.strip():
        raise DocumentParseError("Empty state document.")

    text = XML_DECLARATION.sub("", document.strip(), count=1)
    try:
        root = ET.fromstring(text)
    except ET.ParseError as error:
        raise DocumentParseError(f"Not a well-formed state document: {error}") from error

    if root.tag != ROOT_TAG:
        raise DocumentParseError(f"No <{ROOT_TAG}> element found, got <{root.tag}>.")
    return root


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def _read_player(element: ET.Element) -> Marker:
    text = _text(element)
    if text not in {marker.value for marker in Marker}:
        raise DocumentParseError(f"Invalid <{PLAYER_TAG}>: {text!r}")
    return Marker(text)


def _read_game_type(element: ET.Element) -> GameMode:
    text = _text(element)
    if text not in {mode.value for mode in GameMode}:
        raise DocumentParseError(f"Invalid <{GAME_TYPE_TAG}>: {text!r}")
    return GameMode(text)


def _read_status(element: ET.Element) -> Status:
    text = _text(element)
    if text not in {status.value for status in Status}:
        raise DocumentParseError(f"Invalid <{STATUS_TAG}>: {text!r}")
    return Status(text)


def _read_board(element: ET.Element) -> Board:
    """The board is replaced as a whole: either all nine cells are readable or none is used."""
    rows = element.findall(ROW_TAG)
    if len(rows) != BOARD_SIZE:
        raise DocumentParseError(
            f"<{BOARD_TAG}> needs {BOARD_SIZE} <{ROW_TAG}> elements, found {len(rows)}"
        )

    cells: list[tuple[Cell, ...]] = []
    for row in rows:
        row_cells = row.findall(CELL_TAG)
        if len(row_cells) != BOARD_SIZE:
            raise DocumentParseError(
                f"<{ROW_TAG}> needs {BOARD_SIZE} <{CELL_TAG}> elements, found {len(row_cells)}"
            )
        values = [_text(cell) for cell in row_cells]
        invalid = [value for value in values if value not in {cell.value for cell in Cell}]
        if invalid:
            raise DocumentParseError(f"Invalid <{CELL_TAG}> value(s): {invalid!r}")
        cells.append(tuple(Cell(value) for value in values))

    return Board(tuple(cells))
