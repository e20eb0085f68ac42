"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Iterator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.cli.models import SessionSettings
from src.core.shared_types import GameMode, Marker
from src.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Iterator[Session]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


@pytest.fixture
def settings_factory():
    """Call the inner function with the game type (and first player) you need. Short receive timeout for tests."""

    def _create_settings(
        mode: GameMode = GameMode.MAN_VS_MAN, first_player: Marker = Marker.X
    ) -> SessionSettings:
        return SessionSettings(
            port="loop://",
            baud_rate=9600,
            first_player=first_player,
            mode=mode,
            receive_timeout=5.0,
        )

    return _create_settings
