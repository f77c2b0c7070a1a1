"""
Generation quota per owner, stored in rate_limit_counters so every worker process sees the same count.
Fixed windows aligned to the epoch: window_start = floor(now / window) * window.
consume() increments with one INSERT .. ON CONFLICT DO UPDATE; if the new count is over the limit the
transaction is rolled back (rejected calls do not use quota) and QuotaExceededError carries the
seconds until the window resets.
"""
import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from app.config import settings
from app.database import dialect_insert
from app.errors import QuotaExceededError
from app.models.rate_limit import RateLimitCounter
from app.models.types import utcnow

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class QuotaStatus:
    limit: int
    used: int
    window_start: datetime
    window_seconds: int

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)

    @property
    def resets_at(self) -> datetime:
        return self.window_start + timedelta(seconds=self.window_seconds)

    def retry_after(self, now: datetime) -> int:
        return max(1, math.ceil((self.resets_at - now).total_seconds()))


def window_start_for(now: datetime, window_seconds: int) -> datetime:
    elapsed = int((now - _EPOCH).total_seconds())
    return _EPOCH + timedelta(seconds=elapsed - elapsed % window_seconds)


def consume(db: Session, owner_id: uuid.UUID, now: datetime | None = None) -> QuotaStatus:
    """Count one generation request for owner_id; raise QuotaExceededError when over the limit."""
    now = now or utcnow()
    limit = settings.ai_rate_limit_per_hour
    window_seconds = settings.ai_rate_limit_window_seconds
    start = window_start_for(now, window_seconds)

    insert = dialect_insert(db)
    counters = RateLimitCounter.__table__
    stmt = insert(RateLimitCounter).values(
        id=uuid.uuid4(),
        owner_id=owner_id,
        window_start=start,
        request_count=1,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["owner_id", "window_start"],
        set_={"request_count": counters.c.request_count + 1},
    )
    db.execute(stmt)
    used = (
        db.query(RateLimitCounter.request_count)
        .filter(RateLimitCounter.owner_id == owner_id, RateLimitCounter.window_start == start)
        .scalar()
    )
    status = QuotaStatus(limit=limit, used=used or 0, window_start=start, window_seconds=window_seconds)

    if status.used > limit:
        db.rollback()
        retry_after = status.retry_after(now)
        logger.warning("Generation quota exceeded owner=%s limit=%s retry_after=%ss", owner_id, limit, retry_after)
        raise QuotaExceededError(
            f"AI generation rate limit exceeded. Please try again in {retry_after} seconds.",
            retry_after=retry_after,
        )

    # Old windows for this owner are never read again
    db.query(RateLimitCounter).filter(
        RateLimitCounter.owner_id == owner_id,
        RateLimitCounter.window_start < start,
    ).delete(synchronize_session=False)
    db.commit()
    return status


def remaining(db: Session, owner_id: uuid.UUID, now: datetime | None = None) -> int:
    """Remaining quota in the current window without consuming any."""
    now = now or utcnow()
    start = window_start_for(now, settings.ai_rate_limit_window_seconds)
    used = (
        db.query(RateLimitCounter.request_count)
        .filter(RateLimitCounter.owner_id == owner_id, RateLimitCounter.window_start == start)
        .scalar()
    ) or 0
    return max(0, settings.ai_rate_limit_per_hour - used)
