"""
Topic: one node in an owner's learning tree. parent_id references topics.id (same owner)
with ON DELETE CASCADE, so deleting a topic removes its whole subtree in one statement.
practice_links is a JSON array of {title, url, difficulty}.
"""
import uuid
from datetime import datetime
from sqlalchemy import String, Text, ForeignKey, CheckConstraint, Index
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.types import UuidType, UtcDateTime, utcnow

TOPIC_STATUSES = ("not_started", "in_progress", "completed")
TOPIC_SOURCES = ("manual", "ai")


class Topic(Base):
    __tablename__ = "topics"

    id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(UuidType(), nullable=False, index=True)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        UuidType(), ForeignKey("topics.id", ondelete="CASCADE"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="not_started")
    technology: Mapped[str] = mapped_column(String(100), nullable=False)
    practice_links: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    source: Mapped[str] = mapped_column(String(20), nullable=False, default="manual")  # manual | ai
    completed_at: Mapped[datetime | None] = mapped_column(UtcDateTime(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('not_started', 'in_progress', 'completed')", name="topics_status_check"),
        CheckConstraint("source IN ('manual', 'ai')", name="topics_source_check"),
        CheckConstraint("parent_id IS NULL OR parent_id <> id", name="topics_not_own_parent_check"),
        Index("ix_topics_owner_parent", "owner_id", "parent_id"),
        Index("ix_topics_owner_status", "owner_id", "status"),
        Index("ix_topics_owner_technology", "owner_id", "technology"),
        Index("ix_topics_owner_created", "owner_id", "created_at"),
    )

    # passive_deletes: the database cascade owns subtree removal, the ORM must not load children to null them.
    children = relationship(
        "Topic",
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    parent = relationship("Topic", back_populates="children", remote_side=[id])
