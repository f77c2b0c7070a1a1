"""
Auth boundary: JWT verification for tokens issued by the external auth layer.
The sub claim carries the owner UUID; every topic/profile operation is scoped by it.
create_access_token exists for local tooling and tests (issuance itself lives outside this service).
"""
from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt

from app.config import settings


def create_access_token(owner_id: UUID, expires_in: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_in or timedelta(hours=settings.jwt_expire_hours))
    # JWT exp must be numeric (Unix timestamp), not datetime
    payload = {"sub": str(owner_id), "exp": int(expire.timestamp())}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def owner_id_from_token(token: str) -> UUID | None:
    """Return the owner UUID from a valid token, or None if the token is invalid, expired or malformed."""
    payload = decode_access_token(token)
    if not payload or "sub" not in payload:
        return None
    try:
        return UUID(str(payload["sub"]))
    except ValueError:
        return None
