"""
Profile request/response schemas.
"""
from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ExperienceLevel = Literal["beginner", "intermediate", "advanced", "expert"]
YearsAwayRange = Literal["less-than-1", "1-2", "3-5", "more-than-5"]

# Profile setup form sends a range; stored value is a representative number of years.
YEARS_AWAY_RANGE_TO_YEARS: dict[str, int] = {
    "less-than-1": 0,
    "1-2": 2,
    "3-5": 5,
    "more-than-5": 10,
}


class ProfileUpsertRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    experience_level: ExperienceLevel
    years_away: int = Field(ge=0, le=60, strict=True)


class ProfileSetupRequest(BaseModel):
    """Form-level payload from the onboarding screen (camelCase keys, years as a range)."""
    experienceLevel: ExperienceLevel
    yearsAway: YearsAwayRange

    def to_upsert(self) -> ProfileUpsertRequest:
        return ProfileUpsertRequest(
            experience_level=self.experienceLevel,
            years_away=YEARS_AWAY_RANGE_TO_YEARS[self.yearsAway],
        )


class ProfileResponse(BaseModel):
    owner_id: UUID
    experience_level: str
    years_away: int
    activity_streak: int
    last_completion_date: date | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
