from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.declarative import Base


class Conversation(Base):
    """
    Direct conversation between two users outside of any mentorship.
    participant1_id is always the lower of the two ids, so an unordered
    pair maps to exactly one row.
    """
    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("participant1_id", "participant2_id", name="uq_conversations_pair"),
        CheckConstraint("participant1_id < participant2_id", name="ck_conversations_ordered_pair"),
    )

    id = Column(Integer, primary_key=True, index=True)
    participant1_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    participant2_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    participant1 = relationship("User", foreign_keys=[participant1_id])
    participant2 = relationship("User", foreign_keys=[participant2_id])
    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="[Message.sent_at, Message.id]",
        cascade="all, delete-orphan",
    )

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.participant1_id, self.participant2_id)

    def other_party(self, user_id: str) -> str:
        return self.participant2_id if user_id == self.participant1_id else self.participant1_id


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        # Belongs to a mentorship or to a conversation, never both, never neither
        CheckConstraint(
            "(mentorship_id IS NULL) <> (conversation_id IS NULL)",
            name="ck_messages_single_thread",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    mentorship_id = Column(Integer, ForeignKey("mentorships.id", ondelete="CASCADE"), nullable=True, index=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=True, index=True)
    sender_id = Column(String, ForeignKey("users.id"), nullable=False)
    receiver_id = Column(String, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    sent_at = Column(DateTime, nullable=False, index=True)

    mentorship = relationship("Mentorship", back_populates="messages")
    conversation = relationship("Conversation", back_populates="messages")
