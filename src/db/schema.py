"""Database tables / schema"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBRound(Base):
    __tablename__ = "rounds"
    __table_args__ = (UniqueConstraint("session_id", "round_number"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    session_id: Mapped[UUID] = mapped_column(index=True)
    round_number: Mapped[int]
    sent_document: Mapped[str] = mapped_column(Text)
    received_document: Mapped[str] = mapped_column(Text)
    status: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
