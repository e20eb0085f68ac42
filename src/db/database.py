"""Generate database sessions for the document journal"""

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.db.schema import Base


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker[Session]:
    """Engine + session factory for the given URL. Ensures all tables are created."""
    engine = create_engine(database_url, echo=echo)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)
