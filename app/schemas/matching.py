from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field

from app.db.models.suggestion import SuggestionStatus
from app.services.matching_engine import MatchRole
from app.services.suggestions import Decision
from app.schemas.user import UserSummary


class CandidateResponse(BaseModel):
    candidate: UserSummary
    score: float
    skill_overlap: int
    location_match: int
    in_person_match: int
    availability_conflict: float
    shared_skills: List[str]

    class Config:
        from_attributes = True


class SuggestionCreate(BaseModel):
    mentor_id: str
    mentee_id: str


class SuggestionGenerate(BaseModel):
    role: MatchRole = MatchRole.MENTEE
    limit: Optional[int] = Field(default=None, ge=1, le=50)


class SuggestionRespond(BaseModel):
    decision: Decision


class SuggestionResponse(BaseModel):
    id: int
    mentor_id: str
    mentee_id: str
    status: SuggestionStatus
    created_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    mentorship_id: Optional[int] = None

    class Config:
        from_attributes = True

