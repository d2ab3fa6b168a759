"""
Moves and the rule deciding who wins a round.

Buttons on a choose-move screen are laid out as Rock (1), Paper (2), Scissors (3).
"""

import random
from typing import Optional

from src.core.exceptions import InvalidMoveSelectionError
from src.core.shared_types import Move, Outcome

BUTTON_TO_MOVE: dict[int, Move] = {
    1: Move.ROCK,
    2: Move.PAPER,
    3: Move.SCISSORS,
}

# Each move and the move it defeats
BEATS: dict[Move, Move] = {
    Move.ROCK: Move.SCISSORS,
    Move.SCISSORS: Move.PAPER,
    Move.PAPER: Move.ROCK,
}


def resolve(first: Move, second: Move) -> Outcome:
    """Decide the outcome of a round from the point of view of the first move."""
    if first == second:
        return Outcome.DRAW
    if BEATS[first] == second:
        return Outcome.FIRST_WINS
    return Outcome.SECOND_WINS


def is_move_button(button_index: int) -> bool:
    return button_index in BUTTON_TO_MOVE


def move_from_button(button_index: int) -> Move:
    """Translate a 1-based button position into a move."""
    if not is_move_button(button_index):
        raise InvalidMoveSelectionError(
            f"Button {button_index} is not a move. Pick one from {sorted(BUTTON_TO_MOVE)}."
        )
    return BUTTON_TO_MOVE[button_index]


def random_move(rng: Optional[random.Random] = None) -> Move:
    """Uniformly random move, e.g. for the bot."""
    chooser = rng or random
    return chooser.choice(list(Move))
