"""
Boundary layer data model(s).

These objects are handed from the turn exchange (service layer) to the persistence layer and back.
Everything is kept as plain strings, so the DB layer does not need to know about boards or markers.
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass
class RoundRecord:
    """One completed round of a session: what was sent, what came back, and the status afterwards."""

    session_id: UUID
    round_number: int
    sent_document: str
    received_document: str
    status: str
