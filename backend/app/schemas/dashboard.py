"""
Dashboard statistics response.
"""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class DashboardProfile(BaseModel):
    experience_level: str
    years_away: int
    activity_streak: int


class TopicStats(BaseModel):
    total: int = 0
    not_started: int = 0
    in_progress: int = 0
    completed: int = 0


class TechnologyStats(BaseModel):
    name: str
    total: int
    completed: int


class RecentActivity(BaseModel):
    topic_id: UUID
    topic_title: str
    action: str  # completed | started | updated
    timestamp: datetime


class DashboardStatsResponse(BaseModel):
    profile: DashboardProfile
    topics: TopicStats
    technologies: list[TechnologyStats]
    recent_activity: list[RecentActivity]
