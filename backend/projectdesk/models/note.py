"""
Note Models

Project notes and their file attachments.
At most one note per project is expected to be "current_status";
the note service enforces this, the schema does not.
"""
from datetime import date, datetime
from sqlalchemy import String, Text, Integer, Date, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, List
import enum
import uuid

from ..database import Base


class NoteStatusCategory(str, enum.Enum):
    """Which tab a note belongs to."""
    GENERAL = "general"
    CURRENT_STATUS = "current_status"


class NoteStatusType(str, enum.Enum):
    """Who the current status is waiting on."""
    ME = "me"
    CUSTOMER = "customer"


class Note(Base):
    """A note in a project."""
    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status_category: Mapped[NoteStatusCategory] = mapped_column(
        SQLEnum(NoteStatusCategory),
        default=NoteStatusCategory.GENERAL,
        nullable=False,
        index=True
    )
    status_type: Mapped[Optional[NoteStatusType]] = mapped_column(
        SQLEnum(NoteStatusType),
        nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    project: Mapped["Project"] = relationship("Project", back_populates="notes")
    attachments: Mapped[List["Attachment"]] = relationship(
        "Attachment",
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="Attachment.created_at"
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, category={self.status_category})>"


class Attachment(Base):
    """
    A file attached to a note.

    name is the storage key; url is the public URL returned by storage.
    """
    __tablename__ = "attachments"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    note_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name: Mapped[str] = mapped_column(String(500), nullable=False)
    size: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    type: Mapped[str] = mapped_column(String(255), default="application/octet-stream", nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False
    )

    note: Mapped["Note"] = relationship("Note", back_populates="attachments")

    def __repr__(self) -> str:
        return f"<Attachment(id={self.id}, name={self.name})>"
