"""
Dashboard API: GET /dashboard/stats.
"""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_owner_id
from app.database import get_db
from app.schemas.dashboard import DashboardStatsResponse
from app.services.dashboard_service import get_dashboard_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
def dashboard_stats(owner_id: UUID = Depends(get_current_owner_id), db: Session = Depends(get_db)):
    return get_dashboard_stats(db, owner_id)
