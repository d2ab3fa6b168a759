"""Implementation of (Match)Repository using a process-local dictionary"""

import threading
from dataclasses import replace
from datetime import datetime
from uuid import uuid4

from src.core.models import MatchModel


class InMemoryMatchRepository:
    """Matches live in a dict guarded by a lock. Copies go in and out, so callers never share the stored objects."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._matches: dict[str, MatchModel] = {}

    def get_match(self, match_id: str) -> MatchModel | None:
        """Get match by ID, if record exists."""
        with self._lock:
            stored = self._matches.get(match_id)
            return replace(stored) if stored else None

    def create_match(self, match: MatchModel) -> tuple[MatchModel, str]:
        """Store new match and return the stored data + newly created match ID."""
        with self._lock:
            new_id = uuid4().hex
            while new_id in self._matches:
                new_id = uuid4().hex
            self._matches[new_id] = replace(match)
            return replace(match), new_id

    def update_match(self, match_id: str, match: MatchModel) -> MatchModel | None:
        """Overwrite an existing record."""
        with self._lock:
            if match_id not in self._matches:
                return None
            self._matches[match_id] = replace(match)
            return replace(match)

    def delete_match(self, match_id: str) -> MatchModel | None:
        """Remove a match's record."""
        with self._lock:
            return self._matches.pop(match_id, None)

    def expired_match_ids(self, cutoff: datetime) -> list[str]:
        with self._lock:
            return [
                match_id
                for match_id, match in self._matches.items()
                if match.created_at <= cutoff
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)
