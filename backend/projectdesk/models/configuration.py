"""
Configuration Models

Per-project configuration document: BRD text, BRD files and the
ordered configurator blocks. Blocks of ordinary projects may be
copies of the master project's blocks (source_block_id).
"""
from datetime import datetime
from sqlalchemy import String, Text, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, List
import uuid

from ..database import Base


class ProjectConfiguration(Base):
    """One configuration per project."""
    __tablename__ = "project_configurations"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        unique=True
    )
    is_master: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    brd_content: Mapped[str] = mapped_column(Text, default="", nullable=False)

    business_profile_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    business_profile_name: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    business_map_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    business_map_name: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

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

    project: Mapped["Project"] = relationship("Project", back_populates="configuration")
    blocks: Mapped[List["ConfiguratorBlock"]] = relationship(
        "ConfiguratorBlock",
        back_populates="configuration",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ConfiguratorBlock.block_order"
    )

    def __repr__(self) -> str:
        return f"<ProjectConfiguration(id={self.id}, project_id={self.project_id})>"


class ConfiguratorBlock(Base):
    """
    A named block of free text plus an optional image.

    is_read_only marks blocks whose content was inherited from the
    master project when they were created.
    """
    __tablename__ = "configurator_blocks"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4())
    )
    configuration_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("project_configurations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    block_name: Mapped[str] = mapped_column(String(255), nullable=False)
    block_order: Mapped[int] = mapped_column(Integer, nullable=False)
    text_content: Mapped[str] = mapped_column(Text, default="", nullable=False)

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_name: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    is_read_only: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    source_block_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

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

    configuration: Mapped["ProjectConfiguration"] = relationship(
        "ProjectConfiguration",
        back_populates="blocks"
    )

    __table_args__ = (
        UniqueConstraint("configuration_id", "block_order", name="uq_block_order"),
    )

    def __repr__(self) -> str:
        return f"<ConfiguratorBlock(id={self.id}, order={self.block_order})>"
