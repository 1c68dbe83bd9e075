"""
Project Model

Projects are the top-level container owned by a single user.
Todos, notes, links, meetings and the configuration are scoped by
project_id and cascade-deleted with their project.
"""
from datetime import date, datetime
from sqlalchemy import String, Text, Date, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, List
import enum
import uuid

from ..database import Base


class ProjectStatus(str, enum.Enum):
    """Lifecycle status of a project."""
    ACTIVE = "active"
    HOLD = "hold"
    COMPLETED = "completed"


class ProjectCategory(str, enum.Enum):
    """Dashboard grouping of a project."""
    MAIN = "main"
    MINE = "mine"


class Project(Base):
    """
    A project owned by one user.

    Each project has its own:
    - Todos
    - Notes (with attachments)
    - Links
    - Meetings (with transcripts, summaries and meeting todos)
    - Configuration (BRD and configurator blocks)
    """
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    color: Mapped[str] = mapped_column(String(20), default="#3B82F6", nullable=False)

    status: Mapped[ProjectStatus] = mapped_column(
        SQLEnum(ProjectStatus),
        default=ProjectStatus.ACTIVE,
        nullable=False
    )
    category: Mapped[ProjectCategory] = mapped_column(
        SQLEnum(ProjectCategory),
        default=ProjectCategory.MAIN,
        nullable=False
    )
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

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

    # Relationships
    todos: Mapped[List["Todo"]] = relationship(
        "Todo",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(Todo.created_at)"
    )
    notes: Mapped[List["Note"]] = relationship(
        "Note",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(Note.created_at)"
    )
    links: Mapped[List["Link"]] = relationship(
        "Link",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(Link.created_at)"
    )
    meetings: Mapped[List["Meeting"]] = relationship(
        "Meeting",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(Meeting.meeting_date)"
    )
    configuration: Mapped[Optional["ProjectConfiguration"]] = relationship(
        "ProjectConfiguration",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, title={self.title})>"
