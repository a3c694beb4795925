from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.db.models.mentorship import MentorshipStatus


class MentorshipResponse(BaseModel):
    id: int
    mentor_id: str
    mentee_id: str
    suggestion_id: Optional[int] = None
    status: MentorshipStatus
    start_date: datetime
    end_date: Optional[datetime] = None
    goals: Optional[str] = None
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None

    class Config:
        from_attributes = True


class MentorshipComplete(BaseModel):
    notes: Optional[str] = None


class MentorshipCancel(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class GoalsUpdate(BaseModel):
    goals: Optional[str] = None


class MessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)


class MessageResponse(BaseModel):
    id: int
    mentorship_id: Optional[int] = None
    conversation_id: Optional[int] = None
    sender_id: str
    receiver_id: str
    content: str
    sent_at: datetime

    class Config:
        from_attributes = True


class ConversationCreate(BaseModel):
    participant_id: str


class ConversationResponse(BaseModel):
    id: int
    participant1_id: str
    participant2_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
