"""
Dashboard statistics for one owner: profile summary, status counts, per-technology progress and
the most recently touched topics. Aggregates run in the database (GROUP BY), never per topic.
"""
import uuid

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.models.topic import Topic, TOPIC_STATUSES
from app.schemas.dashboard import (
    DashboardProfile,
    DashboardStatsResponse,
    RecentActivity,
    TechnologyStats,
    TopicStats,
)
from app.services import profile_service

RECENT_ACTIVITY_LIMIT = 5

_ACTION_BY_STATUS = {"completed": "completed", "in_progress": "started"}


def get_dashboard_stats(db: Session, owner_id: uuid.UUID) -> DashboardStatsResponse:
    profile = profile_service.get_or_404(db, owner_id)

    counts = dict.fromkeys(TOPIC_STATUSES, 0)
    rows = (
        db.query(Topic.status, func.count(Topic.id))
        .filter(Topic.owner_id == owner_id)
        .group_by(Topic.status)
        .all()
    )
    for status, n in rows:
        counts[status] = n

    completed_expr = func.sum(case((Topic.status == "completed", 1), else_=0))
    tech_rows = (
        db.query(Topic.technology, func.count(Topic.id), completed_expr)
        .filter(Topic.owner_id == owner_id)
        .group_by(Topic.technology)
        .order_by(Topic.technology.asc())
        .all()
    )

    recent = (
        db.query(Topic)
        .filter(Topic.owner_id == owner_id)
        .order_by(Topic.updated_at.desc(), Topic.id.asc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )

    return DashboardStatsResponse(
        profile=DashboardProfile(
            experience_level=profile.experience_level,
            years_away=profile.years_away,
            activity_streak=profile.activity_streak,
        ),
        topics=TopicStats(total=sum(counts.values()), **counts),
        technologies=[
            TechnologyStats(name=name, total=total, completed=int(done or 0))
            for name, total, done in tech_rows
        ],
        recent_activity=[
            RecentActivity(
                topic_id=t.id,
                topic_title=t.title,
                action=_ACTION_BY_STATUS.get(t.status, "updated"),
                timestamp=t.updated_at,
            )
            for t in recent
        ],
    )
