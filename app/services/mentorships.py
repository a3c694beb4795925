"""
Mentorship lifecycle.

    PENDING --activate--> ACTIVE --complete--> COMPLETED
       |                    |
       +------cancel--------+--------------> CANCELED

COMPLETED and CANCELED are terminal. Every transition checks the current
status first and changes nothing when the move is not allowed.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update, or_
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, AuthorizationError, InvalidStateError, ConflictError
from app.db.models.user import User
from app.db.models.mentorship import Mentorship, MentorshipStatus
from app.db.models.conversation import Message
from app.services.messaging import post_message, list_messages
from app.services.notifications import notification_service, notify_safely, MENTORSHIP_STATUS_CHANGED

logger = logging.getLogger(__name__)

# action -> (allowed source states, target state)
TRANSITIONS = {
    "activate": ({MentorshipStatus.PENDING}, MentorshipStatus.ACTIVE),
    "complete": ({MentorshipStatus.ACTIVE}, MentorshipStatus.COMPLETED),
    "cancel": ({MentorshipStatus.PENDING, MentorshipStatus.ACTIVE}, MentorshipStatus.CANCELED),
}


def get_mentorship(db: Session, mentorship_id: int) -> Mentorship:
    mentorship = db.get(Mentorship, mentorship_id)
    if not mentorship:
        raise NotFoundError(f"Mentorship {mentorship_id} not found")
    return mentorship


def check_participant(mentorship: Mentorship, user: User, allow_staff: bool = True) -> None:
    if user.id in (mentorship.mentor_id, mentorship.mentee_id):
        return
    if allow_staff and user.is_staff:
        return
    raise AuthorizationError("Only the mentor or the mentee can access this mentorship")


def _transition(db: Session, mentorship_id: int, action: str, notifier, **changes) -> Mentorship:
    mentorship = get_mentorship(db, mentorship_id)
    allowed, target = TRANSITIONS[action]

    current = mentorship.status
    if current not in allowed:
        raise InvalidStateError(f"Cannot {action} a {current.value} mentorship")

    result = db.execute(
        update(Mentorship)
        .where(Mentorship.id == mentorship.id, Mentorship.status == current)
        .values(status=target, **changes)
    )
    if result.rowcount != 1:
        db.rollback()
        raise ConflictError("Mentorship was changed by a concurrent request")
    db.commit()
    db.refresh(mentorship)

    logger.info(f"[Mentorship] id={mentorship.id} {current.value} -> {target.value}")

    payload = {"mentorship_id": mentorship.id, "from": current.value, "to": target.value}
    notify_safely(notifier, db, mentorship.mentor_id, MENTORSHIP_STATUS_CHANGED, payload)
    notify_safely(notifier, db, mentorship.mentee_id, MENTORSHIP_STATUS_CHANGED, payload)

    return mentorship


def activate(db: Session, mentorship_id: int, notifier=notification_service) -> Mentorship:
    return _transition(db, mentorship_id, "activate", notifier)


def complete(db: Session, mentorship_id: int, notes: Optional[str] = None, notifier=notification_service) -> Mentorship:
    changes = {"end_date": datetime.utcnow()}
    if notes is not None:
        changes["notes"] = notes
    return _transition(db, mentorship_id, "complete", notifier, **changes)


def cancel(db: Session, mentorship_id: int, reason: Optional[str] = None, notifier=notification_service) -> Mentorship:
    changes = {"end_date": datetime.utcnow()}
    if reason is not None:
        changes["cancel_reason"] = reason
    return _transition(db, mentorship_id, "cancel", notifier, **changes)


def update_goals(db: Session, mentorship_id: int, goals: Optional[str]) -> Mentorship:
    mentorship = get_mentorship(db, mentorship_id)
    if not mentorship.is_open:
        raise InvalidStateError(f"Cannot edit goals of a {mentorship.status.value} mentorship")
    mentorship.goals = goals
    db.commit()
    db.refresh(mentorship)
    return mentorship


def append_message(db: Session, mentorship_id: int, sender: User, content: str) -> Message:
    """Adds a message to the mentorship thread. Only allowed while PENDING or ACTIVE."""
    mentorship = (
        db.query(Mentorship)
        .filter(Mentorship.id == mentorship_id)
        .with_for_update()
        .first()
    )
    if not mentorship:
        raise NotFoundError(f"Mentorship {mentorship_id} not found")

    if sender.id not in (mentorship.mentor_id, mentorship.mentee_id):
        raise AuthorizationError("Only the mentor or the mentee can post in this mentorship")

    if not mentorship.is_open:
        db.rollback()
        raise InvalidStateError(f"Cannot add messages to a {mentorship.status.value} mentorship")

    return post_message(
        db,
        sender_id=sender.id,
        receiver_id=mentorship.other_party(sender.id),
        content=content,
        mentorship_id=mentorship.id,
    )


def mentorship_messages(db: Session, mentorship_id: int) -> List[Message]:
    get_mentorship(db, mentorship_id)
    return list_messages(db, mentorship_id=mentorship_id)


def list_mentorships_for_user(
    db: Session,
    user_id: str,
    status: Optional[MentorshipStatus] = None,
) -> List[Mentorship]:
    query = db.query(Mentorship).filter(
        or_(Mentorship.mentor_id == user_id, Mentorship.mentee_id == user_id)
    )
    if status is not None:
        query = query.filter(Mentorship.status == MentorshipStatus(status))
    return query.order_by(Mentorship.start_date.desc(), Mentorship.id.desc()).all()
