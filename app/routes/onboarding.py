from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.core.auth_guard import get_current_user
from app.schemas.user import SkillSelection, ProfileUpdate, UserResponse, OnboardingStep
from app.services.onboarding import (
    get_next_onboarding_step,
    set_user_skills,
    update_profile,
    complete_onboarding,
)

router = APIRouter(prefix="/api", tags=["onboarding"])


@router.get("/me", response_model=UserResponse)
def read_me(user: User = Depends(get_current_user)):
    return user


@router.get("/onboarding/next", response_model=OnboardingStep)
def next_step(user: User = Depends(get_current_user)):
    return OnboardingStep(next_step=get_next_onboarding_step(user))


@router.put("/onboarding/skills", response_model=UserResponse)
def put_skills(
    selection: SkillSelection,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return set_user_skills(db, user, selection.mentor_skills, selection.mentee_skills)


@router.patch("/onboarding/profile", response_model=UserResponse)
def patch_profile(
    changes: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return update_profile(db, user, **changes.model_dump(exclude_unset=True))


@router.post("/onboarding/complete", response_model=UserResponse)
def finish_onboarding(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return complete_onboarding(db, user)
