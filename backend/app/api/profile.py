"""
Profile API: GET /profile, PUT /profile (upsert), POST /profile/setup (onboarding form ranges).
"""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_owner_id
from app.database import get_db
from app.schemas.profile import ProfileResponse, ProfileSetupRequest, ProfileUpsertRequest
from app.services import profile_service

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def get_profile(owner_id: UUID = Depends(get_current_owner_id), db: Session = Depends(get_db)):
    return profile_service.get_or_404(db, owner_id)


@router.put("", response_model=ProfileResponse)
def upsert_profile(
    data: ProfileUpsertRequest,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    """Create or update experience level and years away. Never resets the activity streak."""
    return profile_service.upsert(db, owner_id, data.experience_level, data.years_away)


@router.post("/setup", response_model=ProfileResponse)
def setup_profile(
    data: ProfileSetupRequest,
    owner_id: UUID = Depends(get_current_owner_id),
    db: Session = Depends(get_db),
):
    upsert = data.to_upsert()
    return profile_service.upsert(db, owner_id, upsert.experience_level, upsert.years_away)
