from sqlalchemy.orm import Session
from app.db.models.user import User
from app.core.errors import NotFoundError

def get_user_or_404(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user

def create_user(
    db: Session,
    name: str,
    email: str,
    mentor_skills=(),
    mentee_skills=(),
    **kwargs
) -> User:
    user = User(
        name=name,
        email=email,
        **kwargs
    )
    user.mentor_skills = list(mentor_skills)
    user.mentee_skills = list(mentee_skills)

    db.add(user)
    db.commit()
    db.refresh(user)
    return user
