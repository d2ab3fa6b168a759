"""Unit tests for src/db/sql_repository.py"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from src.db.database import build_session_factory
from src.db.sql_repository import MatchModel, SQLMatchRepository

CREATED = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def _lobby(created_at: datetime = CREATED) -> MatchModel:
    return MatchModel(initiator=100, created_at=created_at)


def test_create_match(session_factory: sessionmaker[Session]) -> None:
    """Conversion from a MatchModel to DBMatch for a new entry to the database."""
    model = _lobby()
    repo = SQLMatchRepository(session_factory)
    record_in_db, match_id = repo.create_match(model)
    assert isinstance(record_in_db, MatchModel)
    assert record_in_db == model
    assert isinstance(match_id, str) and match_id


def test_created_ids_are_unique(session_factory: sessionmaker[Session]) -> None:
    repo = SQLMatchRepository(session_factory)
    ids = {repo.create_match(_lobby())[1] for _ in range(20)}
    assert len(ids) == 20


def test_get_match_by_id(session_factory: sessionmaker[Session]) -> None:
    """Create a match, then fetch it from db."""
    repo = SQLMatchRepository(session_factory)
    expected_match, match_id = repo.create_match(_lobby())
    match_found = repo.get_match(match_id)
    assert isinstance(match_found, MatchModel)
    assert match_found == expected_match


def test_get_unknown_match(session_factory: sessionmaker[Session]) -> None:
    """
    Should return None if ID does not match anything in database.

    NOTE with an empty database, any id is a valid test case.
    """
    repo = SQLMatchRepository(session_factory)
    assert repo.get_match(uuid4().hex) is None

    # Now do it with creating a match, but retrieving from the wrong ID
    repo.create_match(_lobby())
    assert repo.get_match(uuid4().hex) is None


def test_update_match(session_factory: sessionmaker[Session]) -> None:
    """Update an earlier created record: opponent joins and moves."""
    repo = SQLMatchRepository(session_factory)
    _, match_id = repo.create_match(_lobby())

    after = MatchModel(
        initiator=100,
        opponent=200,
        initiator_move=None,
        opponent_move="rock",
        created_at=CREATED,
    )
    updated_match = repo.update_match(match_id, after)
    assert updated_match is not None
    assert updated_match == after
    assert repo.get_match(match_id) == after


def test_attempt_updating_unknown_match(session_factory: sessionmaker[Session]) -> None:
    """the update_match() method should break early and return None"""
    repo = SQLMatchRepository(session_factory)
    assert repo.update_match(uuid4().hex, _lobby()) is None


def test_delete_match(session_factory: sessionmaker[Session]) -> None:
    """Record of the match should no longer exist after deletion"""
    repo = SQLMatchRepository(session_factory)
    created_match, match_id = repo.create_match(_lobby())
    deleted_match = repo.delete_match(match_id)

    # the correct match should be deleted
    assert deleted_match == created_match

    # The match should no longer be available in db
    assert repo.get_match(match_id) is None
    assert repo.delete_match(match_id) is None


def test_expired_match_ids(session_factory: sessionmaker[Session]) -> None:
    repo = SQLMatchRepository(session_factory)
    _, old_id = repo.create_match(_lobby(CREATED - timedelta(hours=2)))
    _, new_id = repo.create_match(_lobby(CREATED))

    cutoff = CREATED - timedelta(hours=1)
    assert repo.expired_match_ids(cutoff) == [old_id]
    assert sorted(repo.expired_match_ids(CREATED)) == sorted([old_id, new_id])


def test_timestamps_come_back_as_utc(session_factory: sessionmaker[Session]) -> None:
    repo = SQLMatchRepository(session_factory)
    _, match_id = repo.create_match(_lobby())
    stored = repo.get_match(match_id)
    assert stored is not None
    assert stored.created_at.tzinfo is not None
    assert stored.created_at == CREATED


def test_session_factory_from_url() -> None:
    """The default in-memory URL gives a working store on its own engine."""
    repo = SQLMatchRepository(build_session_factory("sqlite://"))
    _, match_id = repo.create_match(_lobby())
    assert repo.get_match(match_id) is not None
