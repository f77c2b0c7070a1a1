"""
Profile: exactly one per owner (owner_id is the primary key, so duplicate creates become upserts).
activity_streak counts consecutive UTC calendar days with at least one topic completion.
"""
import uuid
from datetime import date, datetime
from sqlalchemy import String, SmallInteger, Integer, Date, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import UuidType, UtcDateTime, utcnow

EXPERIENCE_LEVELS = ("beginner", "intermediate", "advanced", "expert")


class Profile(Base):
    __tablename__ = "profiles"

    owner_id: Mapped[uuid.UUID] = mapped_column(UuidType(), primary_key=True)
    experience_level: Mapped[str] = mapped_column(String(20), nullable=False)
    years_away: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    activity_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_completion_date: Mapped[date | None] = mapped_column(Date, nullable=True)  # UTC day
    created_at: Mapped[datetime] = mapped_column(UtcDateTime(), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime(), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "experience_level IN ('beginner', 'intermediate', 'advanced', 'expert')",
            name="profiles_experience_level_check",
        ),
        CheckConstraint("years_away BETWEEN 0 AND 60", name="profiles_years_away_check"),
        CheckConstraint("activity_streak >= 0", name="profiles_activity_streak_check"),
    )
