from sqlalchemy import Column, Integer, String, Table, ForeignKey
from sqlalchemy.orm import relationship
from app.db.declarative import Base

# A user teaches the skills in user_mentor_skills and wants to learn
# the ones in user_mentee_skills. The same skill may appear in both.
user_mentor_skills = Table(
    "user_mentor_skills",
    Base.metadata,
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)

user_mentee_skills = Table(
    "user_mentee_skills",
    Base.metadata,
    Column("user_id", String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)


class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False) # e.g. "go", "system-design"

    mentors = relationship("User", secondary=user_mentor_skills, back_populates="mentor_skills")
    mentees = relationship("User", secondary=user_mentee_skills, back_populates="mentee_skills")

    def __repr__(self):
        return f"<Skill {self.slug}>"
