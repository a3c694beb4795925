from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.db.models.mentorship import MentorshipStatus
from app.core.auth_guard import get_current_user
from app.schemas.mentorship import (
    MentorshipResponse,
    MentorshipComplete,
    MentorshipCancel,
    GoalsUpdate,
    MessageCreate,
    MessageResponse,
)
from app.services import mentorships as mentorship_service

router = APIRouter(prefix="/api/mentorships", tags=["mentorships"])


def _load_for(db: Session, mentorship_id: int, user: User):
    mentorship = mentorship_service.get_mentorship(db, mentorship_id)
    mentorship_service.check_participant(mentorship, user)
    return mentorship


@router.get("", response_model=List[MentorshipResponse])
def list_mentorships(
    status: Optional[MentorshipStatus] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return mentorship_service.list_mentorships_for_user(db, user.id, status)


@router.get("/{mentorship_id}", response_model=MentorshipResponse)
def get_mentorship(mentorship_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _load_for(db, mentorship_id, user)


@router.post("/{mentorship_id}/activate", response_model=MentorshipResponse)
def activate_mentorship(mentorship_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _load_for(db, mentorship_id, user)
    return mentorship_service.activate(db, mentorship_id)


@router.post("/{mentorship_id}/complete", response_model=MentorshipResponse)
def complete_mentorship(
    mentorship_id: int,
    body: Optional[MentorshipComplete] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _load_for(db, mentorship_id, user)
    return mentorship_service.complete(db, mentorship_id, notes=body.notes if body else None)


@router.post("/{mentorship_id}/cancel", response_model=MentorshipResponse)
def cancel_mentorship(
    mentorship_id: int,
    body: Optional[MentorshipCancel] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _load_for(db, mentorship_id, user)
    return mentorship_service.cancel(db, mentorship_id, reason=body.reason if body else None)


@router.patch("/{mentorship_id}/goals", response_model=MentorshipResponse)
def patch_goals(
    mentorship_id: int,
    body: GoalsUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _load_for(db, mentorship_id, user)
    return mentorship_service.update_goals(db, mentorship_id, body.goals)


@router.get("/{mentorship_id}/messages", response_model=List[MessageResponse])
def get_messages(mentorship_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _load_for(db, mentorship_id, user)
    return mentorship_service.mentorship_messages(db, mentorship_id)


@router.post("/{mentorship_id}/messages", response_model=MessageResponse, status_code=201)
def post_message(
    mentorship_id: int,
    body: MessageCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return mentorship_service.append_message(db, mentorship_id, user, body.content)
