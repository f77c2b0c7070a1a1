"""
Generation quota: fixed windows, rejected calls do not consume, owners are independent.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.config import settings
from app.errors import QuotaExceededError
from app.models.rate_limit import RateLimitCounter
from app.services import rate_limit

NOW = datetime(2026, 1, 1, 10, 15, 0, tzinfo=timezone.utc)


def test_window_start_is_aligned():
    assert rate_limit.window_start_for(NOW, 3600) == datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc)
    assert rate_limit.window_start_for(NOW, 900) == datetime(2026, 1, 1, 10, 15, tzinfo=timezone.utc)


def test_consume_until_limit_then_reject(db, owner_id, monkeypatch):
    monkeypatch.setattr(settings, "ai_rate_limit_per_hour", 3)
    remaining = [rate_limit.consume(db, owner_id, now=NOW).remaining for _ in range(3)]
    assert remaining == [2, 1, 0]

    with pytest.raises(QuotaExceededError) as exc_info:
        rate_limit.consume(db, owner_id, now=NOW)
    assert exc_info.value.retry_after == 45 * 60
    assert exc_info.value.status_code == 429

    # The rejected attempt was rolled back
    count = db.query(RateLimitCounter.request_count).filter(RateLimitCounter.owner_id == owner_id).scalar()
    assert count == 3


def test_next_window_starts_fresh(db, owner_id, monkeypatch):
    monkeypatch.setattr(settings, "ai_rate_limit_per_hour", 1)
    rate_limit.consume(db, owner_id, now=NOW)
    with pytest.raises(QuotaExceededError):
        rate_limit.consume(db, owner_id, now=NOW)

    later = NOW + timedelta(hours=1)
    assert rate_limit.consume(db, owner_id, now=later).remaining == 0
    # Previous window's row is gone
    assert db.query(RateLimitCounter).filter(RateLimitCounter.owner_id == owner_id).count() == 1


def test_owners_have_separate_quota(db, owner_id, other_owner_id, monkeypatch):
    monkeypatch.setattr(settings, "ai_rate_limit_per_hour", 1)
    rate_limit.consume(db, owner_id, now=NOW)
    assert rate_limit.consume(db, other_owner_id, now=NOW).remaining == 0
    assert rate_limit.remaining(db, owner_id, now=NOW) == 0


def test_remaining_without_usage(db, owner_id):
    assert rate_limit.remaining(db, owner_id, now=NOW) == settings.ai_rate_limit_per_hour
