from typing import Optional, List, Dict
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from app.db.models.user import UserRole
from app.schemas.skill import SkillResponse

# Weekday -> list of ["HH:MM", "HH:MM"] windows
Availability = Dict[str, List[List[str]]]

# --- Schemas de Entrada (Requests) ---
class SkillSelection(BaseModel):
    mentor_skills: List[str] = Field(default_factory=list, description="Slugs the user can teach")
    mentee_skills: List[str] = Field(default_factory=list, description="Slugs the user wants to learn")

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=60)
    title: Optional[str] = None
    location: Optional[str] = None
    in_person: Optional[bool] = None
    about: Optional[str] = None
    availability: Optional[Availability] = None
    notification_preferences: Optional[Dict[str, bool]] = None

    @field_validator("in_person")
    @classmethod
    def in_person_not_null(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("in_person must be true or false")
        return v

# --- Schemas de Saída (Responses) ---
class UserSummary(BaseModel):
    id: str
    name: Optional[str] = None
    title: Optional[str] = None
    location: Optional[str] = None

    class Config:
        from_attributes = True

class UserResponse(UserSummary):
    email: str
    role: UserRole = UserRole.REGULAR
    in_person: bool = False
    about: Optional[str] = None
    availability: Optional[Availability] = None
    onboarding_completed_at: Optional[datetime] = None
    mentor_skills: List[SkillResponse] = []
    mentee_skills: List[SkillResponse] = []

class UserSkillsResponse(BaseModel):
    user_id: str
    mentor_skills: List[SkillResponse]
    mentee_skills: List[SkillResponse]

class OnboardingStep(BaseModel):
    next_step: str
