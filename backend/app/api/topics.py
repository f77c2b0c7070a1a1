"""
Topics API: list with filters/sort/pagination, create, AI generate, get, children, update, status, delete.
All scoped by current owner id. Errors are AppError subclasses rendered by app.main.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_owner_id, get_generator
from app.database import get_db
from app.errors import validate_model
from app.llm import TopicGenerator
from app.schemas.topic import (
    GenerateTopicsRequest,
    GenerateTopicsResponse,
    TopicChildrenResponse,
    TopicCreate,
    TopicListItem,
    TopicListQuery,
    TopicListResponse,
    TopicResponse,
    TopicStatusUpdate,
    TopicUpdate,
)
from app.services import generation_service, topic_repository, topic_service
from app.services.topic_repository import TopicFilters

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/topics", tags=["topics"])


def _list_item(topic, children_count: int) -> TopicListItem:
    item = TopicListItem.model_validate(topic)
    item.children_count = children_count
    return item


@router.get("", response_model=TopicListResponse)
def list_topics(
    status_filter: str | None = Query(default=None, alias="status"),
    technology: str | None = None,
    parent_id: str | None = None,
    sort: str | None = None,
    order: str | None = None,
    page: str | None = None,
    page_size: str | None = None,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    """List the owner's topics. parent_id=null returns root topics only."""
    raw = {
        "status": status_filter,
        "technology": technology,
        "parent_id": parent_id,
        "sort": sort,
        "order": order,
        "page": page,
        "page_size": page_size,
    }
    query = validate_model(TopicListQuery, {k: v for k, v in raw.items() if v is not None})
    rows, total = topic_repository.list_topics(
        db,
        owner_id,
        TopicFilters(
            status=query.status,
            technology=query.technology,
            parent_id=query.parent_uuid,
            roots_only=query.roots_only,
        ),
        sort=query.sort,
        order=query.order,
        page=query.page,
        page_size=query.page_size,
    )
    return TopicListResponse(
        items=[_list_item(t, n) for t, n in rows],
        total=total,
        page=query.page,
        page_size=query.page_size,
        total_pages=topic_repository.total_pages(total, query.page_size),
    )


@router.post("", response_model=TopicResponse, status_code=status.HTTP_201_CREATED)
def create_topic(
    data: TopicCreate,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    return topic_service.create_topic(db, owner_id, data)


@router.post("/generate", response_model=GenerateTopicsResponse, status_code=status.HTTP_201_CREATED)
def generate_topics(
    data: GenerateTopicsRequest,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
    generator: TopicGenerator = Depends(get_generator),
):
    """Generate 3-10 topics with the configured AI provider. Counts against the hourly quota."""
    result = generation_service.generate_topics(db, owner_id, data, generator)
    return GenerateTopicsResponse(
        items=[TopicResponse.model_validate(t) for t in result.topics],
        count=len(result.topics),
        remaining_quota=result.remaining_quota,
    )


@router.get("/{topic_id}", response_model=TopicListItem)
def get_topic(
    topic_id: UUID,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    topic, children_count = topic_repository.get_with_children_count(db, owner_id, topic_id)
    return _list_item(topic, children_count)


@router.get("/{topic_id}/children", response_model=TopicChildrenResponse)
def get_children(
    topic_id: UUID,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    """Direct children only, oldest first."""
    rows = topic_repository.get_children(db, owner_id, topic_id)
    return TopicChildrenResponse(items=[_list_item(t, n) for t, n in rows])


@router.patch("/{topic_id}", response_model=TopicResponse)
def update_topic(
    topic_id: UUID,
    data: TopicUpdate,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    return topic_service.update_topic(db, owner_id, topic_id, data)


@router.patch("/{topic_id}/status", response_model=TopicResponse)
def update_topic_status(
    topic_id: UUID,
    data: TopicStatusUpdate,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    return topic_service.update_status(db, owner_id, topic_id, data.status)


@router.delete("/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_topic(
    topic_id: UUID,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    """Delete the topic and all of its descendants."""
    topic_service.delete_topic(db, owner_id, topic_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
