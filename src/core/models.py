"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Both the domain layer (Match) and the db layer (repositories) convert to/from the model defined here,
so neither depends on the other's internal representation.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

# Type aliases to make MatchModel easier to read
Identity = int
MoveName = str


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MatchModel:
    """Transport-safe representation of a PvP match used between Service, DB, and domain layers."""

    initiator: Identity
    opponent: Optional[Identity] = None
    initiator_move: Optional[MoveName] = None
    opponent_move: Optional[MoveName] = None
    mode: str = "pvp"
    created_at: datetime = field(default_factory=utc_now)
