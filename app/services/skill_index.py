"""
Read-only projections over the user <-> skill relations.

Nothing here mutates; skills are assigned through the onboarding service.
Unknown users or skills give empty results, absence is not an error.
"""
from typing import Iterable, List, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db.models.skill import Skill, user_mentor_skills, user_mentee_skills
from app.db.models.user import User


def list_skills(db: Session) -> List[Skill]:
    """Full skill catalog, alphabetical."""
    return db.query(Skill).order_by(Skill.name, Skill.id).all()


def get_skills_by_slugs(db: Session, slugs: Iterable[str]) -> List[Skill]:
    slugs = set(slugs)
    if not slugs:
        return []
    return db.query(Skill).filter(Skill.slug.in_(slugs)).all()


def _skills_via(db: Session, association, user_id: str) -> Set[Skill]:
    stmt = (
        select(Skill)
        .join(association, association.c.skill_id == Skill.id)
        .where(association.c.user_id == user_id)
    )
    return set(db.scalars(stmt).all())


def _users_via(db: Session, association, skill_id: int) -> Set[User]:
    stmt = (
        select(User)
        .join(association, association.c.user_id == User.id)
        .where(association.c.skill_id == skill_id)
    )
    return set(db.scalars(stmt).all())


def mentor_skills_of(db: Session, user_id: str) -> Set[Skill]:
    return _skills_via(db, user_mentor_skills, user_id)


def mentee_skills_of(db: Session, user_id: str) -> Set[Skill]:
    return _skills_via(db, user_mentee_skills, user_id)


def users_offering_skill(db: Session, skill_id: int) -> Set[User]:
    return _users_via(db, user_mentor_skills, skill_id)


def users_seeking_skill(db: Session, skill_id: int) -> Set[User]:
    return _users_via(db, user_mentee_skills, skill_id)


def skill_ids_by_user(db: Session, association, user_ids: Iterable[str]) -> dict:
    """Bulk variant used by the scorer: {user_id: {skill_id, ...}} in a single query."""
    user_ids = list(user_ids)
    result = {user_id: set() for user_id in user_ids}
    if not user_ids:
        return result

    rows = db.execute(
        select(association.c.user_id, association.c.skill_id)
        .where(association.c.user_id.in_(user_ids))
    ).all()
    for user_id, skill_id in rows:
        result[user_id].add(skill_id)
    return result
