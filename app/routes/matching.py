from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.db.models.suggestion import SuggestionStatus
from app.db.crud.users import get_user_or_404
from app.core.auth_guard import get_current_user
from app.core.errors import AuthorizationError
from app.schemas.matching import (
    CandidateResponse,
    SuggestionCreate,
    SuggestionGenerate,
    SuggestionRespond,
    SuggestionResponse,
)
from app.services.matching_engine import matching_engine, MatchRole
from app.services import suggestions as suggestion_service

router = APIRouter(prefix="/api", tags=["matching"])


@router.get("/matches", response_model=List[CandidateResponse])
def get_matches(
    role: MatchRole = Query(MatchRole.MENTEE, description="Role the current user is looking to play"),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    results = []
    for scored in matching_engine.score_candidates(db, user, role):
        if len(results) >= limit:
            break
        results.append(scored)
    return results


@router.get("/suggestions", response_model=List[SuggestionResponse])
def get_suggestions(
    status: Optional[SuggestionStatus] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return suggestion_service.list_suggestions_for_user(db, user.id, status)


@router.post("/suggestions", response_model=SuggestionResponse, status_code=201)
def post_suggestion(
    body: SuggestionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    # Regular users may only propose pairings they are part of
    if not user.is_staff and user.id not in (body.mentor_id, body.mentee_id):
        raise AuthorizationError("You can only create suggestions that include yourself")

    mentor = get_user_or_404(db, body.mentor_id)
    mentee = get_user_or_404(db, body.mentee_id)
    return suggestion_service.create_suggestion(db, mentor, mentee)


@router.post("/suggestions/generate", response_model=List[SuggestionResponse], status_code=201)
def generate_suggestions(
    body: SuggestionGenerate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return suggestion_service.generate_suggestions_for_user(db, user, body.role, body.limit)


@router.post("/suggestions/{suggestion_id}/respond", response_model=SuggestionResponse)
def respond_to_suggestion(
    suggestion_id: int,
    body: SuggestionRespond,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return suggestion_service.respond(db, suggestion_id, user, body.decision)
