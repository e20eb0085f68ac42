"""Implementation of (Document)Repository using SQLAlchemy"""

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from src.core.models import RoundRecord
from src.db.schema import DBRound


class SQLDocumentRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def add_round(self, record: RoundRecord) -> RoundRecord:
        """Store a completed round and return what was stored."""
        round_db = DBRound(
            session_id=record.session_id,
            round_number=record.round_number,
            sent_document=record.sent_document,
            received_document=record.received_document,
            status=record.status,
        )
        self.db.add(round_db)
        self.db.commit()
        self.db.refresh(round_db)
        return self._to_model(round_db)

    def get_rounds(self, session_id: UUID) -> list[RoundRecord]:
        """All rounds of a session, in the order they were played."""
        query = (
            select(DBRound)
            .where(DBRound.session_id == session_id)
            .order_by(DBRound.round_number)
        )
        return [self._to_model(round_db) for round_db in self.db.scalars(query)]

    def latest_round(self, session_id: UUID) -> RoundRecord | None:
        """Last completed round of a session, if any."""
        query = (
            select(DBRound)
            .where(DBRound.session_id == session_id)
            .order_by(DBRound.round_number.desc())
            .limit(1)
        )
        round_db = self.db.scalar(query)
        if round_db:
            return self._to_model(round_db)
        return None

    def delete_session(self, session_id: UUID) -> int:
        """Remove all rounds of a session. Returns the number of rounds removed."""
        result = self.db.execute(delete(DBRound).where(DBRound.session_id == session_id))
        self.db.commit()
        return result.rowcount

    def _to_model(self, round_db: DBRound) -> RoundRecord:
        """Convert SQLAlchemy model to data transfer model."""
        return RoundRecord(
            session_id=round_db.session_id,
            round_number=round_db.round_number,
            sent_document=round_db.sent_document,
            received_document=round_db.received_document,
            status=round_db.status,
        )
