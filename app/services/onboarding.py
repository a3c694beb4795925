import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, InvalidStateError
from app.db.models.user import User
from app.services.skill_index import get_skills_by_slugs

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "title", "location", "in_person", "about", "availability", "notification_preferences")
# Columns that cannot be cleared
REQUIRED_PROFILE_FIELDS = ("in_person",)


def get_next_onboarding_step(user: User) -> str:
    """
    Determines the next step in the onboarding flow for a user.
    Users who finished onboarding go straight to the dashboard.
    """
    if user.onboarding_completed_at is not None:
        return "/dashboard"

    # Interests page: pick what to teach and what to learn
    return "/onboarding/interests"


def _resolve_slugs(db: Session, slugs: Iterable[str]) -> list:
    wanted = {slug.strip().lower() for slug in slugs if slug and slug.strip()}
    skills = get_skills_by_slugs(db, wanted)
    missing = wanted - {skill.slug for skill in skills}
    if missing:
        raise NotFoundError(f"Unknown skills: {', '.join(sorted(missing))}")
    return sorted(skills, key=lambda skill: skill.slug)


def set_user_skills(db: Session, user: User, mentor_slugs: Iterable[str], mentee_slugs: Iterable[str]) -> User:
    """Replaces both skill sets of the user. Nothing is written if any slug is unknown."""
    mentor_skills = _resolve_slugs(db, mentor_slugs)
    mentee_skills = _resolve_slugs(db, mentee_slugs)

    user.mentor_skills = mentor_skills
    user.mentee_skills = mentee_skills
    db.commit()
    db.refresh(user)

    logger.info(
        f"[Onboarding] user={user.id} mentor_skills={[s.slug for s in mentor_skills]} "
        f"mentee_skills={[s.slug for s in mentee_skills]}"
    )
    return user


def update_profile(db: Session, user: User, **fields) -> User:
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    cleared = [key for key in REQUIRED_PROFILE_FIELDS if key in fields and fields[key] is None]
    if cleared:
        raise ValueError(f"Profile fields cannot be null: {', '.join(cleared)}")

    for key, value in fields.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user


def complete_onboarding(db: Session, user: User) -> User:
    """Marks onboarding as finished. Idempotent; requires at least one declared skill."""
    if user.onboarding_completed_at is not None:
        return user

    if not user.mentor_skills and not user.mentee_skills:
        raise InvalidStateError("Declare at least one skill to mentor or to learn before finishing onboarding")

    user.onboarding_completed_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    logger.info(f"[Onboarding] user={user.id} completed onboarding")
    return user
