"""
RateLimitCounter: generation requests per (owner_id, window_start).
Incremented with an atomic upsert so concurrent workers share one quota.
"""
import uuid
from datetime import datetime
from sqlalchemy import Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import UuidType, UtcDateTime


class RateLimitCounter(Base):
    __tablename__ = "rate_limit_counters"

    id: Mapped[uuid.UUID] = mapped_column(
        UuidType(), primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(UuidType(), nullable=False)
    window_start: Mapped[datetime] = mapped_column(UtcDateTime(), nullable=False)
    request_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("owner_id", "window_start", name="uq_rate_limit_owner_window"),
    )
