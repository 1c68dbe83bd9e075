"""
Mirror Outbox Model

Durable record of mirror calls that failed ("sync debt").
Every failed mirror write lands here so it can be replayed later.
"""
from datetime import datetime
from sqlalchemy import String, Text, Integer, DateTime, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional
import enum
import uuid

from ..database import Base


class OutboxStatus(str, enum.Enum):
    """Delivery state of a sync debt entry."""
    PENDING = "pending"
    DELIVERED = "delivered"
    ABANDONED = "abandoned"


class MirrorOutboxEntry(Base):
    """
    A mirror call waiting to be delivered.

    Entries are replayed per user, oldest first, because the bearer
    token needed to deliver them belongs to that user.
    """
    __tablename__ = "mirror_outbox"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # Target of the mirror call
    resource: Mapped[str] = mapped_column(String(50), nullable=False)
    op: Mapped[str] = mapped_column(String(20), nullable=False)
    entity_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)

    # JSON body as it would have been sent
    payload: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[OutboxStatus] = mapped_column(
        SQLEnum(OutboxStatus),
        default=OutboxStatus.PENDING,
        nullable=False,
        index=True
    )
    attempts: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    next_attempt_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True
    )
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_outbox_user_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<MirrorOutboxEntry(id={self.id}, {self.op} {self.resource}, status={self.status})>"
