"""
Topic lifecycle: create (optional parent), partial update, status transition, cascading delete.
Validation happens on the schema objects before any write; parent ownership is checked before insert.
Status transitions are unordered; moving into completed stamps completed_at and evaluates the
owner's streak in the same transaction, moving out clears completed_at.
"""
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError, validate_model
from app.models.topic import Topic, TOPIC_STATUSES
from app.models.types import utcnow
from app.schemas.topic import TopicCreate, TopicUpdate
from app.services import profile_service
from app.services.topic_repository import (
    PARENT_NOT_FOUND_MSG,
    TOPIC_NOT_FOUND_MSG,
    get_by_id,
    get_owned_parent,
)

logger = logging.getLogger(__name__)


def create_topic(db: Session, owner_id: uuid.UUID, data: TopicCreate | dict, source: str = "manual") -> Topic:
    data = validate_model(TopicCreate, data)
    if data.parent_id is not None:
        get_owned_parent(db, owner_id, data.parent_id)
    now = utcnow()
    topic = Topic(
        owner_id=owner_id,
        parent_id=data.parent_id,
        title=data.title,
        description=data.description,
        status=data.status,
        technology=data.technology,
        practice_links=[link.model_dump(mode="json") for link in data.practice_links],
        source=source,
        completed_at=now if data.status == "completed" else None,
        created_at=now,
        updated_at=now,
    )
    db.add(topic)
    try:
        db.commit()
    except IntegrityError:
        # Parent removed between the ownership check and the insert
        db.rollback()
        logger.info("create_topic: parent %s vanished before insert (owner %s)", data.parent_id, owner_id)
        raise NotFoundError(PARENT_NOT_FOUND_MSG)
    db.refresh(topic)
    logger.info("Topic created id=%s owner=%s parent=%s", topic.id, owner_id, topic.parent_id)
    return topic


def update_topic(db: Session, owner_id: uuid.UUID, topic_id: uuid.UUID, data: TopicUpdate | dict) -> Topic:
    data = validate_model(TopicUpdate, data)
    topic = get_by_id(db, owner_id, topic_id)
    for field, value in data.changes().items():
        setattr(topic, field, value)
    # Accepted updates always count as activity, even when the values are unchanged
    topic.updated_at = utcnow()
    db.commit()
    db.refresh(topic)
    return topic


def update_status(
    db: Session,
    owner_id: uuid.UUID,
    topic_id: uuid.UUID,
    new_status: str,
) -> Topic:
    if new_status not in TOPIC_STATUSES:
        raise ValidationError(
            "Invalid status",
            details=[{"field": "status", "message": "Status must be one of: " + ", ".join(TOPIC_STATUSES)}],
        )
    topic = get_by_id(db, owner_id, topic_id)
    if topic.status == new_status:
        return topic
    now = utcnow()
    topic.status = new_status
    if new_status == "completed":
        topic.completed_at = now
        profile_service.record_completion(db, owner_id, today=now.date(), commit=False)
    else:
        topic.completed_at = None
    db.commit()
    db.refresh(topic)
    logger.info("Topic %s status -> %s (owner %s)", topic_id, new_status, owner_id)
    return topic


def delete_topic(db: Session, owner_id: uuid.UUID, topic_id: uuid.UUID) -> None:
    """
    Delete the topic and its whole subtree. One DELETE; descendants go through the
    topics.parent_id ON DELETE CASCADE constraint inside the same transaction.
    """
    deleted = (
        db.query(Topic)
        .filter(Topic.id == topic_id, Topic.owner_id == owner_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        db.rollback()
        raise NotFoundError(TOPIC_NOT_FOUND_MSG)
    db.commit()
    db.expire_all()
    logger.info("Topic %s deleted with its subtree (owner %s)", topic_id, owner_id)
