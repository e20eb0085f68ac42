"""
Command line entrypoint.
----

tictactoe-serial play   client side of a game (menus for everything not given as a flag)
tictactoe-serial serve  answering side: referee + automated player
tictactoe-serial send   plain terminal: send one line, print the reply

Exit code 0 when the program ends normally (also when a player quits), 1 when the port cannot be used.
"""

import argparse
import logging
import random
import sys
from contextlib import ExitStack
from typing import Callable, Optional

from pydantic import ValidationError

from src.cli import prompts
from src.cli.models import DEFAULT_RECEIVE_TIMEOUT, BaudRate, SessionSettings
from src.core.exceptions import (
    InvalidSettingsError,
    MoveRejectedError,
    QuitRequested,
    TransportError,
)
from src.core.shared_types import GameMode, Marker
from src.db.database import create_session_factory
from src.db.sql_repository import SQLDocumentRepository
from src.services.peer_service import PeerService
from src.services.turn_exchange import TurnExchange
from src.tictactoe.board import Board
from src.tictactoe.players import ConsoleMoveSource, MoveSource, RandomMoveSource
from src.tictactoe.state import GameState
from src.transport.framing import TERMINATOR, FramedChannel
from src.transport.serial_port import DEFAULT_READ_TIMEOUT, SerialTransport, Transport

logger = logging.getLogger(__name__)

RED = "\033[31m"
GREEN = "\033[32m"
RESET = "\033[0m"
SEPARATOR = prompts.SEPARATOR

MODE_CHOICES: dict[str, GameMode] = {
    "man-man": GameMode.MAN_VS_MAN,
    "man-ai": GameMode.MAN_VS_AI,
    "ai-man": GameMode.AI_VS_MAN,
    "ai-ai": GameMode.AI_VS_AI,
}

Reader = Callable[[str], str]
Writer = Callable[[str], None]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tictactoe-serial",
        description="Tic-tac-toe over a serial link.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_port_arguments(command: argparse.ArgumentParser) -> None:
        command.add_argument("--port", help="COM3, /dev/ttyUSB0 or a pyserial URL")
        command.add_argument(
            "--baud", type=int, choices=[rate.value for rate in BaudRate]
        )
        command.add_argument(
            "--timeout",
            type=float,
            help=f"seconds to wait for the peer (play / send default: {DEFAULT_RECEIVE_TIMEOUT}, serve waits without limit)",
        )
        command.add_argument(
            "--no-timeout",
            action="store_true",
            help="wait for the peer's reply as long as it takes",
        )
        command.add_argument(
            "--read-timeout",
            type=float,
            default=DEFAULT_READ_TIMEOUT,
            help="seconds a single read of the device may block (default: %(default)s)",
        )

    play = sub.add_parser("play", help="play a game (client side)")
    add_port_arguments(play)
    play.add_argument("--first", choices=["X", "O", "random"])
    play.add_argument("--mode", choices=list(MODE_CHOICES))
    play.add_argument("--journal", help="SQLAlchemy URL to record every round, e.g. sqlite:///games.db")
    play.set_defaults(func=cmd_play)

    serve = sub.add_parser("serve", help="answer a game (server side)")
    add_port_arguments(serve)
    serve.add_argument("--seed", type=int, help="seed for the automated player")
    serve.set_defaults(func=cmd_serve)

    send = sub.add_parser("send", help="send raw lines and print the replies")
    add_port_arguments(send)
    send.set_defaults(func=cmd_send)

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# -- Commands --
def cmd_play(
    args: argparse.Namespace,
    transport: Optional[Transport],
    read: Reader,
    write: Writer,
) -> int:
    write(f"\n{SEPARATOR}\n      Welcome to \"Tic - tac - toe\"\n{SEPARATOR}")
    port = args.port or prompts.select_port(read, write)
    baud = args.baud or prompts.select_baud_rate(read, write)
    if args.first in ("X", "O"):
        first_player = Marker(args.first)
    elif args.first == "random":
        first_player = random.choice([Marker.X, Marker.O])
    else:
        first_player = prompts.select_first_player(read, write)
    mode = MODE_CHOICES[args.mode] if args.mode else prompts.select_game_mode(read, write)

    settings = _settings(
        write,
        port=port,
        baud_rate=baud,
        first_player=first_player,
        mode=mode,
        receive_timeout=_receive_timeout(args, DEFAULT_RECEIVE_TIMEOUT),
        read_timeout=args.read_timeout,
        journal_url=args.journal,
    )
    if settings is None:
        return 1

    write(f"{SEPARATOR}\n      {settings.first_player} goes first\n{SEPARATOR}")
    write(f"{SEPARATOR}\n      Selected Game Mode: {settings.mode}\n{SEPARATOR}")
    if settings.mode != GameMode.AI_VS_AI:
        write("      Hints for selecting cells")
        write(Board.hint())
    write("      Board:")
    write(Board.empty().render())

    move_source: MoveSource = (
        RandomMoveSource()
        if settings.mode == GameMode.AI_VS_AI
        else ConsoleMoveSource(read, write)
    )

    def show_state(state: GameState) -> None:
        write(SEPARATOR)
        write("      Board:")
        write(state.board.render())

    def show_rejection(error: MoveRejectedError) -> None:
        write(f"{RED}      {error}{RESET}")

    with ExitStack() as stack:
        repository = None
        if settings.journal_url:
            session_factory = create_session_factory(settings.journal_url)
            repository = SQLDocumentRepository(stack.enter_context(session_factory()))

        exchange = TurnExchange(
            FramedChannel(transport or SerialTransport(settings.read_timeout)),
            settings,
            move_source,
            repository=repository,
            on_state=show_state,
            on_rejected=show_rejection,
        )
        try:
            status = exchange.run()
        except QuitRequested:
            write("Exit from program.")
            return 0
        except TransportError as error:
            return _fail(write, error)

    write(f"{GREEN}{SEPARATOR}{RESET}")
    write(f"{GREEN}                  {status}{RESET}")
    write(f"{GREEN}{SEPARATOR}{RESET}")
    return 0


def cmd_serve(
    args: argparse.Namespace,
    transport: Optional[Transport],
    read: Reader,
    write: Writer,
) -> int:
    port = args.port or prompts.select_port(read, write)
    baud = args.baud or prompts.select_baud_rate(read, write)
    settings = _settings(
        write,
        port=port,
        baud_rate=baud,
        # waits for the next document without limit unless --timeout is given
        receive_timeout=_receive_timeout(args, None),
        read_timeout=args.read_timeout,
    )
    if settings is None:
        return 1

    def show_state(state: GameState) -> None:
        write(f"{SEPARATOR}\n      {state.mode} | {state.status}")
        write(state.board.render())

    peer = PeerService(
        FramedChannel(transport or SerialTransport(settings.read_timeout)),
        settings,
        RandomMoveSource(random.Random(args.seed)),
        on_state=show_state,
    )
    write(f"      Waiting for a game on {settings.port} ...")
    try:
        status = peer.serve()
    except TransportError as error:
        return _fail(write, error)
    write(f"{GREEN}      {status}{RESET}")
    return 0


def cmd_send(
    args: argparse.Namespace,
    transport: Optional[Transport],
    read: Reader,
    write: Writer,
) -> int:
    port = args.port or prompts.select_port(read, write)
    baud = args.baud or prompts.select_baud_rate(read, write, rates=list(BaudRate))
    settings = _settings(
        write,
        port=port,
        baud_rate=baud,
        receive_timeout=_receive_timeout(args, DEFAULT_RECEIVE_TIMEOUT),
        read_timeout=args.read_timeout,
    )
    if settings is None:
        return 1

    channel = FramedChannel(transport or SerialTransport(settings.read_timeout))
    while True:
        message = read("Enter message to send (empty line to quit): ")
        if not message:
            break
        try:
            with channel.connection(settings.port, settings.baud_rate) as handle:
                channel.send(handle, message + TERMINATOR.decode())
                write(f"Message sent: {message}")
                write("- - - Waiting for response - - -")
                reply = channel.receive(handle, timeout=settings.receive_timeout)
        except TransportError as error:
            return _fail(write, error)
        write(f"Received message: {reply.rstrip()}")
    write("Exit from program.")
    return 0


# -- Internal helpers --
def _receive_timeout(args: argparse.Namespace, default: Optional[float]) -> Optional[float]:
    if args.no_timeout:
        return None
    return default if args.timeout is None else args.timeout


def _settings(write: Writer, **fields: object) -> Optional[SessionSettings]:
    try:
        return SessionSettings(**fields)
    except (InvalidSettingsError, ValidationError) as error:
        write(f"{RED}      Invalid settings: {error}{RESET}")
        return None


def _fail(write: Writer, error: TransportError) -> int:
    logger.error("Session aborted: %s", error)
    write(SEPARATOR)
    write(f"{RED}      {error}{RESET}")
    write(SEPARATOR)
    return 1


def main(
    argv: Optional[list[str]] = None,
    transport: Optional[Transport] = None,
    read: Reader = input,
    write: Writer = print,
) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    try:
        return args.func(args, transport, read, write)
    except (EOFError, KeyboardInterrupt):
        # Ctrl+D / Ctrl+C at any prompt ends the program like "q"
        write("Exit from program.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
