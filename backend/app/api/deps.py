"""
Shared dependencies: get_current_owner_id from Bearer token.
Topic, profile and dashboard APIs use this to scope every query by owner_id.
"""
import logging
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.errors import AuthenticationError
from app.llm import TopicGenerator, get_topic_generator
from app.services.auth import owner_id_from_token

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


def get_current_owner_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UUID:
    """Require valid Bearer token; return the owner UUID or 401."""
    if not credentials or not (getattr(credentials, "credentials", None) or "").strip():
        logger.debug("Auth failed: no Bearer token in request")
        raise AuthenticationError("Not authenticated. Send header: Authorization: Bearer <token>")
    owner_id = owner_id_from_token(credentials.credentials)
    if owner_id is None:
        logger.debug("Auth failed: invalid or expired token")
        raise AuthenticationError("Invalid or expired token")
    return owner_id


def get_generator() -> TopicGenerator:
    """Dependency: configured topic generator (overridden with fakes in tests)."""
    return get_topic_generator()
