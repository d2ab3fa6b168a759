"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Any, Callable, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings
from src.db.schema import Base
from src.services.verification import ActionVerifier

PUBLIC_URL = "https://frame.test"

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture
def session_factory() -> Generator[sessionmaker[Session], None, None]:
    """Sessions on a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def settings() -> Settings:
    return Settings(public_url=PUBLIC_URL, match_ttl_seconds=3600)


class FakeValidationClient:
    """
    Stands in for the validation service.
    The "signed blob" is simply "<fid>:<button>:<url>", anything else is rejected.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []

    def validate_frame_action(self, message_bytes_hex: str) -> dict[str, Any]:
        self.calls.append(message_bytes_hex)
        parts = message_bytes_hex.split(":", 2)
        if len(parts) != 3 or not parts[0].isdigit():
            return {"valid": False}
        fid, button, url = parts
        return {
            "valid": True,
            "action": {
                "interactor": {"fid": int(fid)},
                "tapped_button": {"index": int(button)},
                "url": url,
            },
        }


def signed(fid: int, button: int, url: str) -> dict[str, Any]:
    """Callback body as a frame client would post it."""
    return {
        "untrustedData": {"fid": fid, "buttonIndex": button, "url": url},
        "trustedData": {"messageBytes": f"{fid}:{button}:{url}"},
    }


@pytest.fixture
def sign() -> Callable[[int, int, str], dict[str, Any]]:
    return signed


@pytest.fixture
def fake_client() -> FakeValidationClient:
    return FakeValidationClient()


@pytest.fixture
def verifier(fake_client: FakeValidationClient) -> ActionVerifier:
    return ActionVerifier(fake_client)
