"""Exceptions shared by all layers."""


class GameError(Exception):
    """Base class for everything raised on purpose by this package."""


class GameStateError(GameError):
    """An operation is not allowed in the current state of the session (e.g. the game is over)."""


class MoveRejectedError(GameError):
    """The proposed move cannot be played. Recoverable: solicit another move."""


class OutOfRangeMoveError(MoveRejectedError):
    """Move is not an integer in 1..9. Caught before it reaches the board."""


class DocumentParseError(GameError):
    """(Part of) a state document could not be interpreted. Never aborts a session."""


class InvalidSettingsError(GameError):
    """Session settings given on the command line / prompts are unusable."""


class QuitRequested(GameError):
    """The user asked to leave the game."""


# --- Transport ---
class TransportError(GameError):
    """Anything that invalidates the transport handle. Fatal for the session."""


class TransportOpenError(TransportError):
    pass


class TransportIOError(TransportError):
    pass


class ReceiveTimeoutError(TransportError):
    """No complete message arrived within the allowed time."""


class FramingError(TransportError):
    """Outgoing message does not respect the line-terminator framing rule."""
