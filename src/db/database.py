"""Generate database sessions"""

from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.db.schema import Base


def build_engine(database_url: str) -> Engine:
    """
    Create the engine for the match table.

    NOTE an in-memory SQLite database only exists for a single connection, so all sessions must share it (StaticPool).
    """
    if database_url == "sqlite://" or (
        database_url.startswith("sqlite") and ":memory:" in database_url
    ):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url)


def build_session_factory(database_url: str) -> sessionmaker[Session]:
    engine = build_engine(database_url)
    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
