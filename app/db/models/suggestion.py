import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.declarative import Base


class SuggestionStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class Suggestion(Base):
    """
    A proposed mentor/mentee pairing.
    PENDING until one of the two users answers; ACCEPTED and DECLINED are final.
    """
    __tablename__ = "suggestions"
    __table_args__ = (
        # Last line of defence against two concurrent inserts for the same pair
        Index(
            "uq_suggestions_pending_pair",
            "mentor_id",
            "mentee_id",
            unique=True,
            sqlite_where=text("status = 'PENDING'"),
            postgresql_where=text("status = 'PENDING'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    mentor_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentee_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum(SuggestionStatus, name="suggestion_status", native_enum=False),
        default=SuggestionStatus.PENDING,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow)
    responded_at = Column(DateTime, nullable=True)

    mentor = relationship("User", foreign_keys=[mentor_id])
    mentee = relationship("User", foreign_keys=[mentee_id])
    mentorship = relationship("Mentorship", back_populates="suggestion", uselist=False)

    @property
    def mentorship_id(self):
        return self.mentorship.id if self.mentorship is not None else None
