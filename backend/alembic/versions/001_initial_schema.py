"""Initial schema: profiles, topics, rate_limit_counters.

Revision ID: 001
Revises:
Create Date: Initial

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("experience_level", sa.String(20), nullable=False),
        sa.Column("years_away", sa.SmallInteger(), nullable=False),
        sa.Column("activity_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_completion_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "experience_level IN ('beginner', 'intermediate', 'advanced', 'expert')",
            name="profiles_experience_level_check",
        ),
        sa.CheckConstraint("years_away BETWEEN 0 AND 60", name="profiles_years_away_check"),
        sa.CheckConstraint("activity_streak >= 0", name="profiles_activity_streak_check"),
        sa.PrimaryKeyConstraint("owner_id"),
    )

    op.create_table(
        "topics",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("parent_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="not_started"),
        sa.Column("technology", sa.String(100), nullable=False),
        sa.Column("practice_links", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("source", sa.String(20), nullable=False, server_default="manual"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('not_started', 'in_progress', 'completed')", name="topics_status_check"),
        sa.CheckConstraint("source IN ('manual', 'ai')", name="topics_source_check"),
        sa.CheckConstraint("parent_id IS NULL OR parent_id <> id", name="topics_not_own_parent_check"),
        sa.ForeignKeyConstraint(["parent_id"], ["topics.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_topics_owner_id", "topics", ["owner_id"], unique=False)
    op.create_index("ix_topics_parent_id", "topics", ["parent_id"], unique=False)
    op.create_index("ix_topics_owner_parent", "topics", ["owner_id", "parent_id"], unique=False)
    op.create_index("ix_topics_owner_status", "topics", ["owner_id", "status"], unique=False)
    op.create_index("ix_topics_owner_technology", "topics", ["owner_id", "technology"], unique=False)
    op.create_index("ix_topics_owner_created", "topics", ["owner_id", "created_at"], unique=False)

    op.create_table(
        "rate_limit_counters",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("window_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("request_count", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("owner_id", "window_start", name="uq_rate_limit_owner_window"),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("rate_limit_counters")
    op.drop_index("ix_topics_owner_created", table_name="topics")
    op.drop_index("ix_topics_owner_technology", table_name="topics")
    op.drop_index("ix_topics_owner_status", table_name="topics")
    op.drop_index("ix_topics_owner_parent", table_name="topics")
    op.drop_index("ix_topics_parent_id", table_name="topics")
    op.drop_index("ix_topics_owner_id", table_name="topics")
    op.drop_table("topics")
    op.drop_table("profiles")
