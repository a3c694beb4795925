import enum
import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Text, JSON, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.declarative import Base
from app.db.models.skill import user_mentor_skills, user_mentee_skills


class UserRole(str, enum.Enum):
    REGULAR = "REGULAR"
    ADMIN = "ADMIN"
    OWNER = "OWNER"


class User(Base):
    __tablename__ = "users"

    # --- Identity (issued by the external identity provider) ---
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(Enum(UserRole, name="user_role", native_enum=False), default=UserRole.REGULAR, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # --- Profile ---
    title = Column(String, nullable=True)
    location = Column(String, nullable=True)
    in_person = Column(Boolean, default=False, nullable=False)
    about = Column(Text, nullable=True)

    # {"mon": [["09:00", "12:00"]], "wed": [["18:00", "20:00"]]}
    availability = Column(JSON, nullable=True)
    notification_preferences = Column(JSON, default=dict)

    # Null until onboarding is finished; such users never show up as candidates
    onboarding_completed_at = Column(DateTime, nullable=True)

    # --- Skills ---
    mentor_skills = relationship("Skill", secondary=user_mentor_skills, back_populates="mentors")
    mentee_skills = relationship("Skill", secondary=user_mentee_skills, back_populates="mentees")

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.OWNER)

    def __repr__(self):
        return f"<User {self.id}>"
