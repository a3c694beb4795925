import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, AuthorizationError, InvalidStateError
from app.db.models.user import User
from app.db.models.conversation import Conversation, Message

logger = logging.getLogger(__name__)


def _next_sent_at(db: Session, thread_column, thread_id: int) -> datetime:
    # sent_at must increase strictly within a thread even if the clock does not move
    now = datetime.utcnow()
    last = db.query(func.max(Message.sent_at)).filter(thread_column == thread_id).scalar()
    if last is not None and now <= last:
        return last + timedelta(microseconds=1)
    return now


def post_message(
    db: Session,
    sender_id: str,
    receiver_id: str,
    content: str,
    mentorship_id: Optional[int] = None,
    conversation_id: Optional[int] = None,
) -> Message:
    """Low-level insert shared by mentorship and direct messages. Callers check permissions."""
    if (mentorship_id is None) == (conversation_id is None):
        raise ValueError("A message belongs to exactly one mentorship or conversation")

    content = (content or "").strip()
    if not content:
        raise InvalidStateError("Message content cannot be empty")

    if mentorship_id is not None:
        sent_at = _next_sent_at(db, Message.mentorship_id, mentorship_id)
    else:
        sent_at = _next_sent_at(db, Message.conversation_id, conversation_id)

    message = Message(
        mentorship_id=mentorship_id,
        conversation_id=conversation_id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        sent_at=sent_at,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return message


def list_messages(
    db: Session,
    mentorship_id: Optional[int] = None,
    conversation_id: Optional[int] = None,
) -> List[Message]:
    if (mentorship_id is None) == (conversation_id is None):
        raise ValueError("Pass exactly one of mentorship_id or conversation_id")

    query = db.query(Message)
    if mentorship_id is not None:
        query = query.filter(Message.mentorship_id == mentorship_id)
    else:
        query = query.filter(Message.conversation_id == conversation_id)
    return query.order_by(Message.sent_at, Message.id).all()


# ---------------------------------------------------------
# DIRECT CONVERSATIONS
# ---------------------------------------------------------
def _find_conversation(db: Session, first_id: str, second_id: str) -> Optional[Conversation]:
    return db.query(Conversation).filter(
        Conversation.participant1_id == first_id,
        Conversation.participant2_id == second_id,
    ).first()


def get_or_create_conversation(db: Session, user_a_id: str, user_b_id: str) -> Conversation:
    """
    Returns the single conversation between two users, creating it on first use.
    The lower id is always stored as participant1.
    """
    if user_a_id == user_b_id:
        raise InvalidStateError("A conversation needs two distinct users")

    for user_id in (user_a_id, user_b_id):
        if not db.get(User, user_id):
            raise NotFoundError(f"User {user_id} not found")

    first_id, second_id = sorted((user_a_id, user_b_id))
    conversation = _find_conversation(db, first_id, second_id)
    if conversation:
        return conversation

    conversation = Conversation(participant1_id=first_id, participant2_id=second_id)
    db.add(conversation)
    try:
        db.commit()
    except IntegrityError:
        # Another request created it first
        db.rollback()
        return _find_conversation(db, first_id, second_id)

    db.refresh(conversation)
    logger.info(f"[Conversation] created id={conversation.id} between {first_id} and {second_id}")
    return conversation


def get_conversation(db: Session, conversation_id: int) -> Conversation:
    conversation = db.get(Conversation, conversation_id)
    if not conversation:
        raise NotFoundError(f"Conversation {conversation_id} not found")
    return conversation


def get_conversation_for(db: Session, conversation_id: int, user: User) -> Conversation:
    conversation = get_conversation(db, conversation_id)
    if not conversation.has_participant(user.id):
        raise AuthorizationError("Only participants can access this conversation")
    return conversation


def list_conversations_for_user(db: Session, user_id: str) -> List[Conversation]:
    return (
        db.query(Conversation)
        .filter(or_(Conversation.participant1_id == user_id, Conversation.participant2_id == user_id))
        .order_by(Conversation.created_at.desc(), Conversation.id.desc())
        .all()
    )


def send_direct_message(db: Session, conversation_id: int, sender: User, content: str) -> Message:
    conversation = get_conversation_for(db, conversation_id, sender)
    return post_message(
        db,
        sender_id=sender.id,
        receiver_id=conversation.other_party(sender.id),
        content=content,
        conversation_id=conversation.id,
    )
