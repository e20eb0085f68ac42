"""Interactive menus used when a setting is not given on the command line."""

import random
from typing import Callable, Optional, Sequence

from src.cli.models import GAME_BAUD_RATES, BaudRate
from src.core.shared_types import GameMode, Marker

SEPARATOR = "============================================="
MENU_PORTS = tuple(f"COM{number}" for number in range(1, 10))

Reader = Callable[[str], str]
Writer = Callable[[str], None]


def _choose(
    title: str,
    options: Sequence[str],
    read: Reader,
    write: Writer,
) -> Optional[int]:
    """Show a numbered menu. Returns the 0-based index picked, or None for anything that is not on the menu."""
    write(SEPARATOR)
    write(f"      {title}")
    write(SEPARATOR)
    for number, option in enumerate(options, start=1):
        write(f"  [{number}]  {option}")
    answer = read(f"\nPlease, enter your choice (1-{len(options)}): ").strip()
    if answer.isdigit() and 1 <= int(answer) <= len(options):
        return int(answer) - 1
    return None


def select_port(read: Reader = input, write: Writer = print) -> str:
    """COM1-COM9 by number. Anything else that is typed is used as the port name itself (e.g. /dev/ttyUSB0)."""
    write(SEPARATOR)
    write("      Available COM Ports:")
    write(SEPARATOR)
    for number, port in enumerate(MENU_PORTS, start=1):
        write(f"  [{number}]  {port}")
    answer = read("\nPlease, enter your choice (1-9) or a port name: ").strip()
    if answer.isdigit() and 1 <= int(answer) <= len(MENU_PORTS):
        return MENU_PORTS[int(answer) - 1]
    if answer:
        return answer
    write("Invalid choice, defaulting to COM1.")
    return MENU_PORTS[0]


def select_baud_rate(
    read: Reader = input,
    write: Writer = print,
    rates: Sequence[BaudRate] = GAME_BAUD_RATES,
) -> BaudRate:
    index = _choose(
        "Available Baud Rates:", [f"{rate.value} bps" for rate in rates], read, write
    )
    if index is None:
        write(f"Invalid choice, using default ({rates[0].value} bps).")
        return rates[0]
    return rates[index]


def select_first_player(
    read: Reader = input,
    write: Writer = print,
    rng: Optional[random.Random] = None,
) -> Marker:
    index = _choose(
        "The first move:",
        ["X goes first", "O goes first", "Random choice"],
        read,
        write,
    )
    if index == 2:
        return (rng or random.Random()).choice([Marker.X, Marker.O])
    return Marker.O if index == 1 else Marker.X


def select_game_mode(read: Reader = input, write: Writer = print) -> GameMode:
    modes = list(GameMode)
    index = _choose("Game type:", [mode.value for mode in modes], read, write)
    if index is None:
        write(f"Invalid choice, defaulting to {GameMode.MAN_VS_MAN.value}.")
        return GameMode.MAN_VS_MAN
    return modes[index]
