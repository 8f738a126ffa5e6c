"""Translate the free text of a slash command into a Command."""

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Optional

from slackchess.core.exceptions import IllegalMoveError, UnknownCommandError
from slackchess.core.shared_types import ENGINE_PLAYER, Color


class Verb(StrEnum):
    NEW = "new"
    MOVE = "move"
    BOARD = "board"
    MOVES = "moves"
    RESIGN = "resign"
    DRAW = "draw"
    HELP = "help"


ALIASES: dict[str, Verb] = {
    "play": Verb.NEW,
    "show": Verb.BOARD,
}


class DrawAction(StrEnum):
    OFFER = "offer"
    ACCEPT = "accept"
    DECLINE = "decline"


ENGINE_NAMES = {ENGINE_PLAYER, "bot", "slackbot", "computer"}
FORCE_FLAG = "force"

# <@U024BE7LH> or <@U024BE7LH|bob>
MENTION_PATTERN = re.compile(r"^<@([A-Z0-9]+)(?:\|[^>]*)?>$")

HELP_TEXT = """\
*Chess commands*
`new [@opponent|engine] [white|black] [force]` start a game (default: you play white against the engine)
`move <move>` play a move, e.g. `move e4`, `move Nf3`, `move e7e8q`
`board` show the current position
`moves` list the legal moves
`draw offer|accept|decline` handle a draw offer
`resign` give up the current game
`help` show this message"""


@dataclass(frozen=True)
class Command:
    verb: Verb
    args: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NewGameOptions:
    """Arguments of the `new` verb."""

    opponent: str = ENGINE_PLAYER
    color: Color = Color.WHITE
    force: bool = False


def parse_command(text: str) -> Command:
    """First whitespace-delimited token is the verb, the rest are its arguments. Empty text asks for help."""
    tokens = text.split()
    if not tokens:
        return Command(Verb.HELP)

    word, *args = tokens
    word = word.lower()
    if word in ALIASES:
        verb = ALIASES[word]
    elif word in Verb.__members__.values():
        verb = Verb(word)
    else:
        raise UnknownCommandError(f"Unknown command: {word!r}")
    return Command(verb, tuple(args))


def parse_new_game_options(args: tuple[str, ...]) -> NewGameOptions:
    opponent: Optional[str] = None
    color = Color.WHITE
    force = False
    for arg in args:
        lowered = arg.lower()
        if lowered == FORCE_FLAG:
            force = True
        elif lowered in Color.__members__.values():
            color = Color(lowered)
        elif lowered in ENGINE_NAMES:
            opponent = ENGINE_PLAYER
        elif opponent is None:
            opponent = parse_user(arg)
        else:
            raise UnknownCommandError(f"Unexpected argument for `new`: {arg!r}")
    return NewGameOptions(opponent=opponent or ENGINE_PLAYER, color=color, force=force)


def parse_user(arg: str) -> str:
    """A Slack mention or a bare user id ('@' prefix allowed)."""
    match = MENTION_PATTERN.match(arg)
    if match:
        return match.group(1)
    user = arg.lstrip("@")
    if not user:
        raise UnknownCommandError(f"Cannot interpret {arg!r} as a user.")
    return user


def parse_move_argument(args: tuple[str, ...]) -> str:
    if len(args) != 1:
        raise IllegalMoveError("Usage: `move <move>`, e.g. `move e4` or `move g1f3`.")
    return args[0]


def parse_draw_action(args: tuple[str, ...]) -> DrawAction:
    if len(args) != 1 or args[0].lower() not in DrawAction.__members__.values():
        raise UnknownCommandError("Usage: `draw offer`, `draw accept` or `draw decline`.")
    return DrawAction(args[0].lower())
