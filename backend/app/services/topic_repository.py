"""
Topic queries: owner-scoped filtering, sorting, pagination and children_count enrichment.
children_count comes from one correlated COUNT subquery in the same SELECT (no query per row).
"Does not exist" and "belongs to another owner" both surface as NotFoundError.
"""
import logging
import math
import uuid
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Query, Session, aliased

from app.errors import NotFoundError
from app.models.topic import Topic

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("created_at", "updated_at", "title", "status")
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

TOPIC_NOT_FOUND_MSG = "Topic not found"
PARENT_NOT_FOUND_MSG = "Parent topic not found or does not belong to user"


@dataclass
class TopicFilters:
    status: str | None = None
    technology: str | None = None
    parent_id: uuid.UUID | None = None
    roots_only: bool = False  # parent_id IS NULL; takes precedence over parent_id


def children_count_column():
    """Scalar subquery: number of direct children of the outer Topic row."""
    child = aliased(Topic)
    return (
        select(func.count(child.id))
        .where(child.parent_id == Topic.id)
        .correlate(Topic)
        .scalar_subquery()
        .label("children_count")
    )


def _filter_predicates(owner_id: uuid.UUID, filters: TopicFilters) -> list:
    predicates = [Topic.owner_id == owner_id]
    if filters.status:
        predicates.append(Topic.status == filters.status)
    if filters.technology:
        predicates.append(Topic.technology == filters.technology)
    if filters.roots_only:
        predicates.append(Topic.parent_id.is_(None))
    elif filters.parent_id is not None:
        predicates.append(Topic.parent_id == filters.parent_id)
    return predicates


def _apply_sort(q: Query, sort: str, order: str) -> Query:
    if sort not in SORTABLE_FIELDS:
        raise ValueError(f"Unsupported sort field: {sort}")
    column = getattr(Topic, sort)
    if order == "asc":
        return q.order_by(column.asc(), Topic.id.asc())
    return q.order_by(column.desc(), Topic.id.desc())


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0


def list_topics(
    db: Session,
    owner_id: uuid.UUID,
    filters: TopicFilters | None = None,
    sort: str = "created_at",
    order: str = "desc",
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[tuple[Topic, int]], int]:
    """
    Return ((topic, children_count) rows for the requested page, total matching rows).
    The count uses the same predicate as the page query. A page past the end is an empty list.
    """
    filters = filters or TopicFilters()
    page = max(1, page)
    page_size = min(max(1, page_size), MAX_PAGE_SIZE)
    predicates = _filter_predicates(owner_id, filters)

    total = db.query(func.count(Topic.id)).filter(*predicates).scalar() or 0
    if total == 0:
        return [], 0

    q = db.query(Topic, children_count_column()).filter(*predicates)
    q = _apply_sort(q, sort, order)
    rows = q.offset((page - 1) * page_size).limit(page_size).all()
    return [(topic, count or 0) for topic, count in rows], total


def get_by_id(db: Session, owner_id: uuid.UUID, topic_id: uuid.UUID) -> Topic:
    topic = db.query(Topic).filter(Topic.id == topic_id, Topic.owner_id == owner_id).first()
    if not topic:
        raise NotFoundError(TOPIC_NOT_FOUND_MSG)
    return topic


def get_with_children_count(db: Session, owner_id: uuid.UUID, topic_id: uuid.UUID) -> tuple[Topic, int]:
    row = (
        db.query(Topic, children_count_column())
        .filter(Topic.id == topic_id, Topic.owner_id == owner_id)
        .first()
    )
    if not row:
        raise NotFoundError(TOPIC_NOT_FOUND_MSG)
    topic, count = row
    return topic, count or 0


def exists_and_owned(db: Session, owner_id: uuid.UUID, topic_id: uuid.UUID) -> bool:
    return (
        db.query(Topic.id).filter(Topic.id == topic_id, Topic.owner_id == owner_id).first()
        is not None
    )


def get_owned_parent(db: Session, owner_id: uuid.UUID, parent_id: uuid.UUID) -> Topic:
    """Parent lookup for create/generate; same not-found outcome whether absent or foreign."""
    parent = db.query(Topic).filter(Topic.id == parent_id, Topic.owner_id == owner_id).first()
    if not parent:
        logger.info("Parent topic %s not available to owner %s", parent_id, owner_id)
        raise NotFoundError(PARENT_NOT_FOUND_MSG)
    return parent


def get_children(db: Session, owner_id: uuid.UUID, parent_id: uuid.UUID) -> list[tuple[Topic, int]]:
    """Direct children of parent_id (not recursive), oldest first, each with its own children_count."""
    if not exists_and_owned(db, owner_id, parent_id):
        raise NotFoundError(PARENT_NOT_FOUND_MSG)
    rows = (
        db.query(Topic, children_count_column())
        .filter(Topic.owner_id == owner_id, Topic.parent_id == parent_id)
        .order_by(Topic.created_at.asc(), Topic.id.asc())
        .all()
    )
    return [(topic, count or 0) for topic, count in rows]


def completed_titles(db: Session, owner_id: uuid.UUID, technology: str, limit: int) -> list[str]:
    """Titles of the owner's completed topics for technology, most recently completed first."""
    rows = (
        db.query(Topic.title)
        .filter(
            Topic.owner_id == owner_id,
            Topic.technology == technology,
            Topic.status == "completed",
        )
        .order_by(Topic.completed_at.desc(), Topic.title.asc())
        .limit(limit)
        .all()
    )
    return [r.title for r in rows]
