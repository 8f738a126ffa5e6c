"""
Exceptions used across layers.

GameError and its subclasses are valid outcomes of a slash command: the API layer turns them into a normal
(HTTP 200) reply explaining the rejection. Everything else maps to an HTTP error status or a startup failure.
"""


class SlackChessError(Exception):
    """Top-level custom exception."""


# --- Game logic (rendered as text replies) ---
class GameError(SlackChessError):
    """A well-formed command that cannot be carried out in the current game state."""


class IllegalMoveError(GameError):
    pass


class UnknownCommandError(GameError):
    pass


class GameInProgressError(GameError):
    pass


class NoActiveGameError(GameError):
    pass


class GameAlreadyFinishedError(GameError):
    pass


class NotYourTurnError(GameError):
    pass


class NotAParticipantError(GameError):
    pass


class NoDrawOfferError(GameError):
    pass


# --- Position / rendering ---
class InvalidPositionNotationError(SlackChessError):
    pass


class RenderError(SlackChessError):
    pass


# --- Transport ---
class TransportDecodeError(SlackChessError):
    pass


class AuthError(SlackChessError):
    pass


# --- Collaborators ---
class EngineUnavailableError(SlackChessError):
    """The move-suggestion engine failed or did not answer in time."""


class RepositoryError(SlackChessError):
    pass


class ConcurrentUpdateError(RepositoryError):
    """Compare-and-swap failed: the stored record changed since it was read."""


class ConfigError(SlackChessError):
    pass
