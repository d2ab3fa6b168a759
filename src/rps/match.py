"""
The Match class is the entrypoint into the domain layer for the service layer.
It holds the rules of a single PvP contest: who is playing, which moves were made, and when it is decided.
The service layer is responsible for loading/storing it (and for doing so atomically per match).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Self

from src.core.models import Identity, MatchModel, utc_now
from src.core.shared_types import MatchMode, MatchStatus, Move, Outcome
from src.rps.moves import resolve


@dataclass
class Match:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    initiator: Identity
    opponent: Optional[Identity]
    initiator_move: Optional[Move]
    opponent_move: Optional[Move]
    created_at: datetime

    @classmethod
    def new_match(
        cls, initiator: Identity, created_at: Optional[datetime] = None
    ) -> Self:
        """Open a lobby. Only the initiator is known at this point."""
        return cls(
            initiator=initiator,
            opponent=None,
            initiator_move=None,
            opponent_move=None,
            created_at=created_at or utc_now(),
        )

    @classmethod
    def from_model(cls, model: MatchModel) -> Self:
        """Define how to construct a Match from the information the Service layer actually has"""
        return cls(
            initiator=model.initiator,
            opponent=model.opponent,
            initiator_move=Move(model.initiator_move) if model.initiator_move else None,
            opponent_move=Move(model.opponent_move) if model.opponent_move else None,
            created_at=model.created_at,
        )

    def to_model(self) -> MatchModel:
        """Encode back into a format the Service layer uses"""
        return MatchModel(
            initiator=self.initiator,
            opponent=self.opponent,
            initiator_move=self.initiator_move.value if self.initiator_move else None,
            opponent_move=self.opponent_move.value if self.opponent_move else None,
            mode=MatchMode.PVP.value,
            created_at=self.created_at,
        )

    @property
    def status(self) -> MatchStatus:
        if self.opponent is None:
            return MatchStatus.WAITING_FOR_OPPONENT
        if self.initiator_move is None or self.opponent_move is None:
            return MatchStatus.WAITING_FOR_MOVES
        return MatchStatus.COMPLETE

    @property
    def outcome(self) -> Optional[Outcome]:
        """Outcome from the initiator's point of view, once both moves are in."""
        if self.initiator_move is None or self.opponent_move is None:
            return None
        return resolve(self.initiator_move, self.opponent_move)

    @property
    def winner(self) -> Optional[Identity]:
        """Identity of the winner. None while undecided and for a draw."""
        outcome = self.outcome
        if outcome == Outcome.FIRST_WINS:
            return self.initiator
        if outcome == Outcome.SECOND_WINS:
            return self.opponent
        return None

    def register_player(self, identity: Identity) -> bool:
        """
        Bind the first identity (other than the initiator) that acts on this match as the opponent.
        Returns True if the opponent was bound by this call.
        """
        if self.opponent is not None or identity == self.initiator:
            return False
        self.opponent = identity
        return True

    def submit_move(self, identity: Identity, move: Move) -> bool:
        """
        Record a move for whichever role the identity holds.
        ----
        First write wins: a move that is already recorded is never overwritten, so retried or duplicate taps are harmless.
        Identities holding no role in the match are ignored.
        Returns True if a move was recorded by this call.
        """
        if identity == self.initiator:
            if self.initiator_move is None:
                self.initiator_move = move
                return True
            return False
        if self.opponent is not None and identity == self.opponent:
            if self.opponent_move is None:
                self.opponent_move = move
                return True
        return False

    def is_expired(self, now: datetime, ttl_seconds: int) -> bool:
        if ttl_seconds <= 0:
            return False
        return now - self.created_at >= timedelta(seconds=ttl_seconds)
