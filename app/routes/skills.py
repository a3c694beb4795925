from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.skill import SkillResponse
from app.schemas.user import UserSkillsResponse, UserSummary
from app.services import skill_index

router = APIRouter(prefix="/api", tags=["skills"])

# Unknown users and skills read as empty projections, never as 404


def _sorted_skills(skills):
    return sorted(skills, key=lambda skill: skill.slug)


def _sorted_users(users):
    return sorted(users, key=lambda user: user.id)


def _skill_ids(db: Session, slug: str) -> List[int]:
    return [skill.id for skill in skill_index.get_skills_by_slugs(db, [slug])]


@router.get("/skills", response_model=List[SkillResponse])
def get_skills(db: Session = Depends(get_db)):
    return skill_index.list_skills(db)


@router.get("/users/{user_id}/skills", response_model=UserSkillsResponse)
def get_user_skills(user_id: str, db: Session = Depends(get_db)):
    return UserSkillsResponse(
        user_id=user_id,
        mentor_skills=_sorted_skills(skill_index.mentor_skills_of(db, user_id)),
        mentee_skills=_sorted_skills(skill_index.mentee_skills_of(db, user_id)),
    )


@router.get("/skills/{slug}/mentors", response_model=List[UserSummary])
def get_skill_mentors(slug: str, db: Session = Depends(get_db)):
    users = set()
    for skill_id in _skill_ids(db, slug):
        users |= skill_index.users_offering_skill(db, skill_id)
    return _sorted_users(users)


@router.get("/skills/{slug}/mentees", response_model=List[UserSummary])
def get_skill_mentees(slug: str, db: Session = Depends(get_db)):
    users = set()
    for skill_id in _skill_ids(db, slug):
        users |= skill_index.users_seeking_skill(db, skill_id)
    return _sorted_users(users)
