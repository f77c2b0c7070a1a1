"""
SQLAlchemy models. Import here so Alembic and app can use them.
"""
from app.models.topic import Topic
from app.models.profile import Profile
from app.models.rate_limit import RateLimitCounter

__all__ = ["Topic", "Profile", "RateLimitCounter"]
