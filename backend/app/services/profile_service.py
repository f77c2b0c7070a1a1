"""
Profile and activity streak.

Streak rule, by UTC calendar day of the completion:
  - last completion today      -> unchanged (one increment per day at most)
  - last completion yesterday  -> streak + 1
  - otherwise (gap or first)   -> streak = 1
The streak is never decremented by status changes away from completed.
"""
import logging
import uuid
from datetime import date, timedelta

from sqlalchemy.orm import Session

from app.database import dialect_insert
from app.errors import NotFoundError
from app.models.profile import Profile
from app.models.types import utcnow

logger = logging.getLogger(__name__)

PROFILE_NOT_FOUND_MSG = "Profile not found. Complete your profile first."


def get_profile(db: Session, owner_id: uuid.UUID) -> Profile | None:
    return db.query(Profile).filter(Profile.owner_id == owner_id).first()


def get_or_404(db: Session, owner_id: uuid.UUID) -> Profile:
    profile = get_profile(db, owner_id)
    if not profile:
        raise NotFoundError(PROFILE_NOT_FOUND_MSG)
    return profile


def upsert(db: Session, owner_id: uuid.UUID, experience_level: str, years_away: int) -> Profile:
    """
    Create the owner's profile with activity_streak=0, or update experience_level/years_away.
    Single INSERT .. ON CONFLICT statement, so concurrent first calls cannot create duplicates
    and an update never touches activity_streak.
    """
    now = utcnow()
    insert = dialect_insert(db)
    stmt = insert(Profile).values(
        owner_id=owner_id,
        experience_level=experience_level,
        years_away=years_away,
        activity_streak=0,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["owner_id"],
        set_={
            "experience_level": stmt.excluded.experience_level,
            "years_away": stmt.excluded.years_away,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    db.execute(stmt)
    db.commit()
    # Drop any stale identity-map copy so the returned row reflects the upsert.
    db.expire_all()
    profile = get_or_404(db, owner_id)
    logger.info("Profile upserted owner=%s level=%s years_away=%s", owner_id, experience_level, years_away)
    return profile


def next_streak(current: int, last_completion: date | None, today: date) -> int:
    if last_completion is not None and last_completion >= today:
        return current
    if last_completion == today - timedelta(days=1):
        return current + 1
    return 1


def record_completion(
    db: Session,
    owner_id: uuid.UUID,
    today: date | None = None,
    commit: bool = True,
) -> Profile | None:
    """
    Apply the streak rule for one transition to completed. Row is locked (FOR UPDATE on PostgreSQL)
    so two completions racing on the same day increment at most once.
    With commit=False the change joins the caller's transaction (used by status updates).
    Owners without a profile have no streak to track; returns None.
    """
    today = today or utcnow().date()
    profile = (
        db.query(Profile)
        .filter(Profile.owner_id == owner_id)
        .with_for_update()
        .first()
    )
    if not profile:
        logger.info("record_completion: no profile for owner %s; streak not tracked", owner_id)
        return None
    last = profile.last_completion_date
    if last is None or last < today:
        profile.activity_streak = next_streak(profile.activity_streak, last, today)
        profile.last_completion_date = today
    if commit:
        db.commit()
        db.refresh(profile)
    else:
        db.flush()
    logger.debug("record_completion: owner=%s streak=%s", owner_id, profile.activity_streak)
    return profile
