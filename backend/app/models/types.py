"""
DB types that work on both SQLite (for local testing) and PostgreSQL.
Use these in models so the app runs without Docker when DATABASE_URL is sqlite:///...
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, TypeDecorator


def utcnow() -> datetime:
    """Timezone-aware current time in UTC; used for column defaults and streak day math."""
    return datetime.now(timezone.utc)


class UuidType(TypeDecorator):
    """UUID that stores as string(36) so it works on SQLite and PostgreSQL."""
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return str(value)
        # Normalise string input (e.g. upper-case ids from clients) so equality filters match.
        return str(uuid.UUID(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)


class UtcDateTime(TypeDecorator):
    """DateTime(timezone=True) that always round-trips as aware UTC. SQLite drops tzinfo on read."""
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
