"""
Topic request/response schemas. Field bounds here are shared by manual create/update and by
validation of provider-generated candidates, so both paths enforce the same rules.
"""
import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
    model_validator,
)

from app.config import settings

TopicStatus = Literal["not_started", "in_progress", "completed"]
SortField = Literal["created_at", "updated_at", "title", "status"]
SortOrder = Literal["asc", "desc"]

TITLE_MAX_LENGTH = 200
TECHNOLOGY_MAX_LENGTH = 100
MAX_PRACTICE_LINKS = 5
ROOT_PARENT_SENTINEL = "null"

_TECHNOLOGY_RE = re.compile(r"^[a-zA-Z0-9\s.\-_]+$")


def _check_technology(v: str) -> str:
    if not _TECHNOLOGY_RE.match(v):
        raise ValueError(
            "Technology must contain only alphanumeric characters, spaces, dots, hyphens, and underscores"
        )
    return v


def _check_description(v: str | None) -> str | None:
    limit = settings.topic_description_max_length
    if v is not None and len(v) > limit:
        raise ValueError(f"Description must not exceed {limit} characters")
    return v


class PracticeLink(BaseModel):
    """External practice problem attached to a topic (opaque to this service beyond its shape)."""
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    url: HttpUrl
    difficulty: Literal["Easy", "Medium", "Hard"]


class TopicCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    technology: str = Field(min_length=1, max_length=TECHNOLOGY_MAX_LENGTH)
    parent_id: UUID | None = None
    description: str | None = None
    status: TopicStatus = "not_started"
    practice_links: list[PracticeLink] = Field(default_factory=list, max_length=MAX_PRACTICE_LINKS)

    @field_validator("technology")
    @classmethod
    def technology_charset(cls, v: str) -> str:
        return _check_technology(v)

    @field_validator("description")
    @classmethod
    def description_length(cls, v: str | None) -> str | None:
        return _check_description(v)


class TopicUpdate(BaseModel):
    """
    Partial update. Only the listed fields are mutable here; status goes through TopicStatusUpdate
    and is rejected as an unknown field. Which fields were sent is read from model_fields_set,
    so an explicit "description": null clears the description.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    technology: str | None = Field(default=None, min_length=1, max_length=TECHNOLOGY_MAX_LENGTH)
    practice_links: list[PracticeLink] | None = Field(default=None, max_length=MAX_PRACTICE_LINKS)

    @field_validator("title", "technology", "practice_links")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field may be omitted but must not be null")
        return v

    @field_validator("technology")
    @classmethod
    def technology_charset(cls, v: str) -> str:
        return _check_technology(v)

    @field_validator("description")
    @classmethod
    def description_length(cls, v: str | None) -> str | None:
        return _check_description(v)

    @model_validator(mode="after")
    def at_least_one_field(self) -> "TopicUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self

    def changes(self) -> dict:
        """Only the fields the caller sent, with practice links as plain JSON dicts."""
        return self.model_dump(mode="json", include=self.model_fields_set)


class TopicStatusUpdate(BaseModel):
    status: TopicStatus


class TopicListQuery(BaseModel):
    """List filters, sort and pagination. parent_id is a UUID or the literal "null" for root topics only."""
    status: TopicStatus | None = None
    technology: str | None = Field(default=None, min_length=1)
    parent_id: str | None = None
    sort: SortField = "created_at"
    order: SortOrder = "desc"
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=100)

    @field_validator("parent_id")
    @classmethod
    def parent_id_uuid_or_null(cls, v: str | None) -> str | None:
        if v is None or v == ROOT_PARENT_SENTINEL:
            return v
        try:
            return str(UUID(v))
        except ValueError:
            raise ValueError('Parent ID must be a valid UUID or "null"')

    @property
    def roots_only(self) -> bool:
        return self.parent_id == ROOT_PARENT_SENTINEL

    @property
    def parent_uuid(self) -> UUID | None:
        if self.parent_id is None or self.roots_only:
            return None
        return UUID(self.parent_id)


class TopicResponse(BaseModel):
    id: UUID
    owner_id: UUID
    parent_id: UUID | None
    title: str
    description: str | None
    status: str
    technology: str
    practice_links: list[dict]
    source: str
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TopicListItem(TopicResponse):
    children_count: int = 0


class TopicListResponse(BaseModel):
    items: list[TopicListItem]
    total: int
    page: int
    page_size: int
    total_pages: int


class TopicChildrenResponse(BaseModel):
    items: list[TopicListItem]


class GenerateTopicsRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    technology: str = Field(min_length=1, max_length=TECHNOLOGY_MAX_LENGTH)
    parent_id: UUID | None = None
    hint: str | None = None

    @field_validator("technology")
    @classmethod
    def technology_charset(cls, v: str) -> str:
        return _check_technology(v)

    @field_validator("hint")
    @classmethod
    def hint_length(cls, v: str | None) -> str | None:
        limit = settings.generation_hint_max_length
        if v is not None and len(v) > limit:
            raise ValueError(f"Hint must not exceed {limit} characters")
        return v or None


class GeneratedTopic(BaseModel):
    """One provider candidate. Older prompts called the links leetcode_links; both keys are accepted."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    practice_links: list[PracticeLink] = Field(
        default_factory=list,
        max_length=MAX_PRACTICE_LINKS,
        validation_alias=AliasChoices("practice_links", "leetcode_links"),
    )

    @field_validator("description")
    @classmethod
    def description_length(cls, v: str | None) -> str | None:
        return _check_description(v)


class GenerateTopicsResponse(BaseModel):
    items: list[TopicResponse]
    count: int
    remaining_quota: int
