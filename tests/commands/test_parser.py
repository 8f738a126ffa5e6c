"""Unit tests for slackchess/commands/parser.py"""

import pytest

from slackchess.commands.parser import (
    Command,
    DrawAction,
    NewGameOptions,
    Verb,
    parse_command,
    parse_draw_action,
    parse_move_argument,
    parse_new_game_options,
    parse_user,
)
from slackchess.core.exceptions import IllegalMoveError, UnknownCommandError
from slackchess.core.shared_types import ENGINE_PLAYER, Color


@pytest.mark.parametrize(
    "text, expected",
    [
        ("new", Command(Verb.NEW)),
        ("move e2e4", Command(Verb.MOVE, ("e2e4",))),
        ("  move   Nf3  ", Command(Verb.MOVE, ("Nf3",))),
        ("MOVE e4", Command(Verb.MOVE, ("e4",))),
        ("board", Command(Verb.BOARD)),
        ("show", Command(Verb.BOARD)),
        ("play <@U123|bob> black", Command(Verb.NEW, ("<@U123|bob>", "black"))),
        ("moves", Command(Verb.MOVES)),
        ("resign", Command(Verb.RESIGN)),
        ("draw offer", Command(Verb.DRAW, ("offer",))),
        ("help", Command(Verb.HELP)),
        ("", Command(Verb.HELP)),
        ("   ", Command(Verb.HELP)),
    ],
)
def test_parse_command(text: str, expected: Command) -> None:
    assert parse_command(text) == expected


@pytest.mark.parametrize("text", ["castle", "e2e4", "newgame", "?"])
def test_unknown_verb(text: str) -> None:
    with pytest.raises(UnknownCommandError):
        parse_command(text)


@pytest.mark.parametrize(
    "args, expected",
    [
        ((), NewGameOptions()),
        (("engine",), NewGameOptions(opponent=ENGINE_PLAYER)),
        (("bot", "black"), NewGameOptions(opponent=ENGINE_PLAYER, color=Color.BLACK)),
        (("<@U123|bob>",), NewGameOptions(opponent="U123")),
        (("<@U123>", "white", "force"), NewGameOptions(opponent="U123", force=True)),
        (("FORCE",), NewGameOptions(force=True)),
        (("@U999", "Black"), NewGameOptions(opponent="U999", color=Color.BLACK)),
    ],
)
def test_parse_new_game_options(args: tuple[str, ...], expected: NewGameOptions) -> None:
    assert parse_new_game_options(args) == expected


def test_new_game_with_two_opponents() -> None:
    with pytest.raises(UnknownCommandError):
        parse_new_game_options(("<@U1>", "<@U2>"))


@pytest.mark.parametrize(
    "arg, user",
    [("<@U024BE7LH>", "U024BE7LH"), ("<@U024BE7LH|bob>", "U024BE7LH"), ("@U1", "U1"), ("U1", "U1")],
)
def test_parse_user(arg: str, user: str) -> None:
    assert parse_user(arg) == user


def test_parse_user_blank() -> None:
    with pytest.raises(UnknownCommandError):
        parse_user("@")


def test_move_argument() -> None:
    assert parse_move_argument(("e4",)) == "e4"
    with pytest.raises(IllegalMoveError):
        parse_move_argument(())
    with pytest.raises(IllegalMoveError):
        parse_move_argument(("e2", "e4"))


@pytest.mark.parametrize(
    "args, action",
    [(("offer",), DrawAction.OFFER), (("Accept",), DrawAction.ACCEPT), (("decline",), DrawAction.DECLINE)],
)
def test_draw_action(args: tuple[str, ...], action: DrawAction) -> None:
    assert parse_draw_action(args) == action


@pytest.mark.parametrize("args", [(), ("maybe",), ("offer", "now")])
def test_invalid_draw_action(args: tuple[str, ...]) -> None:
    with pytest.raises(UnknownCommandError):
        parse_draw_action(args)
