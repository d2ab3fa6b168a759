"""Implementation of (Match)Repository using SQLAlchemy"""

import threading
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from src.core.models import MatchModel
from src.db.schema import DBMatch


class SQLMatchRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy. Every call runs in its own short-lived session."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory
        # In-memory SQLite shares one connection between all sessions: keep transactions from interleaving.
        self._lock = threading.Lock()

    def get_match(self, match_id: str) -> MatchModel | None:
        """Get match by ID, if record exists."""
        with self._lock, self.session_factory() as db:
            match_db = self._fetch_match(db, match_id)
            if match_db:
                return self._to_model(match_db)
            return None

    def create_match(self, match: MatchModel) -> tuple[MatchModel, str]:
        """Store new match and return the stored data + newly created match ID."""
        new_id = uuid4().hex
        match_db = DBMatch(
            id=new_id,
            mode=match.mode,
            initiator=match.initiator,
            opponent=match.opponent,
            initiator_move=match.initiator_move,
            opponent_move=match.opponent_move,
            created_at=match.created_at,
        )
        with self._lock, self.session_factory() as db:
            db.add(match_db)
            db.commit()
            db.refresh(match_db)
            return self._to_model(match_db), new_id

    def update_match(self, match_id: str, match: MatchModel) -> MatchModel | None:
        """Overwrite an existing record."""
        with self._lock, self.session_factory() as db:
            match_db = self._fetch_match(db, match_id)
            if not match_db:
                return None
            match_db.opponent = match.opponent
            match_db.initiator_move = match.initiator_move
            match_db.opponent_move = match.opponent_move
            db.commit()
            db.refresh(match_db)
            return self._to_model(match_db)

    def delete_match(self, match_id: str) -> MatchModel | None:
        """Remove a match's record."""
        with self._lock, self.session_factory() as db:
            match_db = self._fetch_match(db, match_id)
            if not match_db:
                return None
            match_model = self._to_model(match_db)
            db.delete(match_db)
            db.commit()
            return match_model

    def expired_match_ids(self, cutoff: datetime) -> list[str]:
        query = select(DBMatch.id, DBMatch.created_at)
        with self._lock, self.session_factory() as db:
            rows = db.execute(query).all()
        return [match_id for match_id, created_at in rows if _as_utc(created_at) <= cutoff]

    def _fetch_match(self, db: Session, match_id: str) -> DBMatch | None:
        query = select(DBMatch).where(DBMatch.id == match_id)
        return db.scalar(query)

    def _to_model(self, match_db: DBMatch) -> MatchModel:
        """Convert SQLAlchemy model to data transfer model."""
        return MatchModel(
            initiator=match_db.initiator,
            opponent=match_db.opponent,
            initiator_move=match_db.initiator_move,
            opponent_move=match_db.opponent_move,
            mode=match_db.mode,
            created_at=_as_utc(match_db.created_at),
        )


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes. Everything stored is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
