"""Protocol repository for the document journal (can implement later for plain files etc.)"""

from typing import Protocol
from uuid import UUID

from src.core.models import RoundRecord


class DocumentRepository(Protocol):
    """Persistence layer orchestration"""

    def add_round(self, record: RoundRecord) -> RoundRecord:
        """Store a completed round and return what was stored."""
        ...

    def get_rounds(self, session_id: UUID) -> list[RoundRecord]:
        """All rounds of a session, in the order they were played."""
        ...

    def latest_round(self, session_id: UUID) -> RoundRecord | None:
        """Last completed round of a session, if any."""
        ...

    def delete_session(self, session_id: UUID) -> int:
        """Remove all rounds of a session. Returns the number of rounds removed."""
        ...
