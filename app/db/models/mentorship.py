import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Enum, Index, text, func
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.declarative import Base


class MentorshipStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


OPEN_MENTORSHIP_STATUSES = (MentorshipStatus.PENDING, MentorshipStatus.ACTIVE)


class Mentorship(Base):
    __tablename__ = "mentorships"
    __table_args__ = (
        Index(
            "uq_mentorships_open_pair",
            "mentor_id",
            "mentee_id",
            unique=True,
            sqlite_where=text("status IN ('PENDING', 'ACTIVE')"),
            postgresql_where=text("status IN ('PENDING', 'ACTIVE')"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    mentor_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentee_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    suggestion_id = Column(Integer, ForeignKey("suggestions.id"), nullable=True, unique=True)

    status = Column(
        Enum(MentorshipStatus, name="mentorship_status", native_enum=False),
        default=MentorshipStatus.PENDING,
        nullable=False,
    )
    start_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_date = Column(DateTime, nullable=True)

    goals = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    cancel_reason = Column(Text, nullable=True)

    mentor = relationship("User", foreign_keys=[mentor_id])
    mentee = relationship("User", foreign_keys=[mentee_id])
    suggestion = relationship("Suggestion", back_populates="mentorship")
    messages = relationship(
        "Message",
        back_populates="mentorship",
        order_by="[Message.sent_at, Message.id]",
        cascade="all, delete-orphan",
    )

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_MENTORSHIP_STATUSES

    def other_party(self, user_id: str) -> str:
        return self.mentee_id if user_id == self.mentor_id else self.mentor_id


# At most one open mentorship per unordered pair, whoever mentors whom.
# Two-argument min/max are scalar in SQLite; Postgres calls them least/greatest.
Index(
    "uq_mentorships_open_unordered_pair_sqlite",
    func.min(Mentorship.mentor_id, Mentorship.mentee_id),
    func.max(Mentorship.mentor_id, Mentorship.mentee_id),
    unique=True,
    sqlite_where=text("status IN ('PENDING', 'ACTIVE')"),
).ddl_if(dialect="sqlite")

Index(
    "uq_mentorships_open_unordered_pair_pg",
    func.least(Mentorship.mentor_id, Mentorship.mentee_id),
    func.greatest(Mentorship.mentor_id, Mentorship.mentee_id),
    unique=True,
    postgresql_where=text("status IN ('PENDING', 'ACTIVE')"),
).ddl_if(dialect="postgresql")
