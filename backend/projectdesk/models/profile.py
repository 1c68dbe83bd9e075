"""
Profile and Dashboard Layout Models

Profiles are created on a user's first authenticated request.
Dashboard layouts are per-user documents saved explicitly by the client.
"""
from datetime import datetime
from sqlalchemy import String, Text, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class Profile(Base):
    """Application profile for an auth user."""
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), default="", nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, is_admin={self.is_admin})>"


class DashboardLayout(Base):
    """Saved dashboard tile order and sizes, as a JSON list."""
    __tablename__ = "dashboard_layouts"

    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    tiles: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<DashboardLayout(user_id={self.user_id})>"
