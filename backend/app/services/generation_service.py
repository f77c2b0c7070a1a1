"""
AI topic generation, in this order:
  1. validate request          -> ValidationError, nothing consumed
  2. consume quota             -> QuotaExceededError; provider never called
  3. build context             -> profile (404 if missing), optional parent (404), completed titles
  4. call provider             -> one retry on timeout; ProviderUnavailableError / InternalError
  5. validate response         -> count within bounds and every candidate valid, else ProviderContractError
  6. persist                   -> all candidates in one transaction, or none
No DB transaction is held open across the provider call. Quota is not refunded when the provider fails.
Logs carry owner, technology and time only; hints, prompts and responses are never logged.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from tenacity import before_sleep_log, retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from app import metrics
from app.config import settings
from app.errors import (
    AppError,
    NotFoundError,
    ProviderContractError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    pydantic_error_details,
    validate_model,
)
from app.llm.base import GenerationContext, TopicGenerator
from app.llm.parsing import INVALID_RESPONSE_MSG, parse_topic_items
from app.models.topic import Topic
from app.models.types import utcnow
from app.schemas.topic import GeneratedTopic, GenerateTopicsRequest
from app.services import profile_service, rate_limit
from app.services.topic_repository import PARENT_NOT_FOUND_MSG, completed_titles, get_owned_parent

logger = logging.getLogger(__name__)

_candidates_adapter = TypeAdapter(list[GeneratedTopic])


@dataclass
class GenerationResult:
    topics: list[Topic]
    remaining_quota: int


def build_context(db: Session, owner_id: uuid.UUID, request: GenerateTopicsRequest) -> GenerationContext:
    profile = profile_service.get_or_404(db, owner_id)
    parent = None
    if request.parent_id is not None:
        parent = get_owned_parent(db, owner_id, request.parent_id)
    return GenerationContext(
        technology=request.technology,
        experience_level=profile.experience_level,
        years_away=profile.years_away,
        min_topics=settings.generation_min_topics,
        max_topics=settings.generation_max_topics,
        hint=request.hint,
        completed_titles=completed_titles(
            db, owner_id, request.technology, settings.completed_titles_context_limit
        ),
        parent_title=parent.title if parent else None,
        parent_description=parent.description if parent else None,
    )


def call_provider(generator: TopicGenerator, context: GenerationContext, owner_id: uuid.UUID) -> str:
    """Call the generator, retrying once on timeout. Unexpected exceptions surface as unavailable."""

    @retry(
        retry=retry_if_exception_type(ProviderTimeoutError),
        stop=stop_after_attempt(2),
        wait=wait_fixed(settings.ai_retry_wait_seconds),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _generate() -> str:
        return generator.generate_topics(context)

    try:
        return _generate()
    except ProviderTimeoutError:
        metrics.increment_provider_timeouts_total()
        logger.warning(
            "Provider timeout after retry: provider=%s owner=%s technology=%s at=%s",
            getattr(generator, "name", "unknown"), owner_id, context.technology, utcnow().isoformat(),
        )
        raise
    except ProviderContractError:
        metrics.increment_provider_contract_errors_total()
        logger.warning(
            "Provider contract violation: provider=%s owner=%s technology=%s at=%s",
            getattr(generator, "name", "unknown"), owner_id, context.technology, utcnow().isoformat(),
        )
        raise
    except AppError as e:
        logger.warning(
            "Provider call failed: provider=%s code=%s owner=%s technology=%s at=%s",
            getattr(generator, "name", "unknown"), e.code, owner_id, context.technology, utcnow().isoformat(),
        )
        raise
    except Exception as e:
        logger.exception("Provider call raised unexpectedly: owner=%s technology=%s", owner_id, context.technology)
        raise ProviderUnavailableError("AI service temporarily unavailable") from e


def validate_candidates(raw: str, owner_id: uuid.UUID, technology: str) -> list[GeneratedTopic]:
    """Parse and validate provider output as a whole: one bad candidate rejects the batch."""
    try:
        items = parse_topic_items(raw)
        lo, hi = settings.generation_min_topics, settings.generation_max_topics
        if not lo <= len(items) <= hi:
            logger.warning("Provider returned %s topics, expected %s-%s", len(items), lo, hi)
            raise ProviderContractError(f"AI service returned {len(items)} topics; expected between {lo} and {hi}")
        try:
            return _candidates_adapter.validate_python(items)
        except PydanticValidationError as e:
            details = pydantic_error_details(e.errors())
            logger.warning("Provider returned %s invalid field(s): %s", len(details), [d["field"] for d in details])
            raise ProviderContractError(INVALID_RESPONSE_MSG, details=details) from e
    except ProviderContractError:
        metrics.increment_provider_contract_errors_total()
        logger.warning("Provider contract violation: owner=%s technology=%s at=%s", owner_id, technology, utcnow().isoformat())
        raise


def persist_candidates(
    db: Session,
    owner_id: uuid.UUID,
    request: GenerateTopicsRequest,
    candidates: list[GeneratedTopic],
) -> list[Topic]:
    now = utcnow()
    topics = [
        Topic(
            owner_id=owner_id,
            parent_id=request.parent_id,
            title=c.title,
            description=c.description,
            status="not_started",
            technology=request.technology,
            practice_links=[link.model_dump(mode="json") for link in c.practice_links],
            source="ai",
            created_at=now,
            updated_at=now,
        )
        for c in candidates
    ]
    db.add_all(topics)
    try:
        db.commit()
    except IntegrityError:
        # Parent deleted while the provider was answering
        db.rollback()
        logger.info("Generated topics discarded: parent %s gone (owner %s)", request.parent_id, owner_id)
        raise NotFoundError(PARENT_NOT_FOUND_MSG)
    for t in topics:
        db.refresh(t)
    return topics


def generate_topics(
    db: Session,
    owner_id: uuid.UUID,
    request: GenerateTopicsRequest | dict,
    generator: TopicGenerator,
    now: datetime | None = None,
) -> GenerationResult:
    request = validate_model(GenerateTopicsRequest, request)
    quota = rate_limit.consume(db, owner_id, now=now)
    context = build_context(db, owner_id, request)
    # Release the read transaction before the slow external call
    db.commit()
    logger.info("Generating topics: owner=%s technology=%s at=%s", owner_id, request.technology, (now or utcnow()).isoformat())
    raw = call_provider(generator, context, owner_id)
    candidates = validate_candidates(raw, owner_id, request.technology)
    topics = persist_candidates(db, owner_id, request, candidates)
    logger.info("Generated %s topics: owner=%s technology=%s", len(topics), owner_id, request.technology)
    return GenerationResult(topics=topics, remaining_quota=quota.remaining)
