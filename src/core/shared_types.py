"""
Type definitions used across layers
"""

from enum import StrEnum


class Move(StrEnum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"


class Outcome(StrEnum):
    DRAW = "draw"
    FIRST_WINS = "first wins"
    SECOND_WINS = "second wins"


class MatchMode(StrEnum):
    BOT = "bot"
    PVP = "pvp"


class MatchStatus(StrEnum):
    WAITING_FOR_OPPONENT = "waiting for opponent"
    WAITING_FOR_MOVES = "waiting for both moves"
    COMPLETE = "complete"


class ButtonKind(StrEnum):
    POST = "post"
    EXTERNAL_LINK = "external-link"


class Screen(StrEnum):
    """Logical screens of the frame. The name ends up in logs, never on the wire."""

    HOME = "home"
    CHOOSE_MOVE_BOT = "choose move bot"
    CHOOSE_MOVE_PVP = "choose move pvp"
    LOBBY_CREATED = "lobby created"
    WAITING = "waiting"
    BOT_RESULT = "bot result"
    PVP_RESULT = "pvp result"
    HOW_TO_PLAY = "how to play"
    CONNECT_WALLET = "connect wallet"
    ERROR = "error"
