"""Protocol repository (implemented in memory and with SQLAlchemy)"""

from datetime import datetime
from typing import Protocol

from src.core.models import MatchModel


class MatchRepository(Protocol):
    """Persistence layer orchestration.

    Single calls are atomic. Sequences of calls on the same match (read-modify-write) are serialized by the service
    layer with src.db.locks.KeyedLocks.
    """

    def get_match(self, match_id: str) -> MatchModel | None:
        """Get match by ID, if record exists."""
        ...

    def create_match(self, match: MatchModel) -> tuple[MatchModel, str]:
        """Store new match and return the stored data + newly created match ID."""
        ...

    def update_match(self, match_id: str, match: MatchModel) -> MatchModel | None:
        """Overwrite an existing record."""
        ...

    def delete_match(self, match_id: str) -> MatchModel | None:
        """Remove a match's record."""
        ...

    def expired_match_ids(self, cutoff: datetime) -> list[str]:
        """IDs of all matches created at or before the cutoff."""
        ...
