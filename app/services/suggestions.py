import enum
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update, or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, AuthorizationError, InvalidStateError, ConflictError
from app.db.models.user import User
from app.db.models.suggestion import Suggestion, SuggestionStatus
from app.db.models.mentorship import Mentorship, MentorshipStatus, OPEN_MENTORSHIP_STATUSES
from app.services.matching_engine import matching_engine, MatchRole
from app.services.notifications import (
    notification_service,
    notify_safely,
    SUGGESTION_CREATED,
    SUGGESTION_ACCEPTED,
    SUGGESTION_DECLINED,
)

logger = logging.getLogger(__name__)


class Decision(str, enum.Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


def _has_open_mentorship(db: Session, user_a: str, user_b: str) -> bool:
    """PENDING or ACTIVE mentorship between the two users, whoever mentors whom."""
    return db.query(Mentorship.id).filter(
        Mentorship.status.in_(OPEN_MENTORSHIP_STATUSES),
        or_(
            and_(Mentorship.mentor_id == user_a, Mentorship.mentee_id == user_b),
            and_(Mentorship.mentor_id == user_b, Mentorship.mentee_id == user_a),
        ),
    ).first() is not None


def _has_pending_suggestion(db: Session, mentor_id: str, mentee_id: str) -> bool:
    return db.query(Suggestion.id).filter(
        Suggestion.mentor_id == mentor_id,
        Suggestion.mentee_id == mentee_id,
        Suggestion.status == SuggestionStatus.PENDING,
    ).first() is not None


def create_suggestion(db: Session, mentor: User, mentee: User, notifier=notification_service) -> Suggestion:
    """
    Proposes mentor -> mentee as a PENDING suggestion.

    Raises InvalidStateError for a self pairing and ConflictError when the ordered
    pair already has a pending suggestion or the two users already share an open
    mentorship. A concurrent duplicate insert is caught by the partial unique
    index and reported as ConflictError as well.
    """
    if mentor.id == mentee.id:
        raise InvalidStateError("A user cannot be suggested to themself")

    if _has_pending_suggestion(db, mentor.id, mentee.id):
        raise ConflictError("A pending suggestion already exists for this pair")

    if _has_open_mentorship(db, mentor.id, mentee.id):
        raise ConflictError("These users already have a pending or active mentorship")

    suggestion = Suggestion(mentor_id=mentor.id, mentee_id=mentee.id, status=SuggestionStatus.PENDING)
    db.add(suggestion)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[Suggestion] concurrent insert for mentor={mentor.id} mentee={mentee.id}: {e.orig}")
        raise ConflictError("A pending suggestion already exists for this pair")

    db.refresh(suggestion)
    logger.info(f"[Suggestion] created id={suggestion.id} mentor={mentor.id} mentee={mentee.id}")

    payload = {"suggestion_id": suggestion.id, "mentor_id": mentor.id, "mentee_id": mentee.id}
    notify_safely(notifier, db, mentor.id, SUGGESTION_CREATED, payload)
    notify_safely(notifier, db, mentee.id, SUGGESTION_CREATED, payload)

    return suggestion


def respond(
    db: Session,
    suggestion_id: int,
    acting_user: User,
    decision: Decision,
    notifier=notification_service,
) -> Suggestion:
    """
    Accepts or declines a pending suggestion on behalf of its mentor or mentee.

    Accepting flips the suggestion to ACCEPTED and inserts a PENDING mentorship
    in the same transaction; either both land or neither does.
    """
    decision = Decision(decision)

    suggestion = db.get(Suggestion, suggestion_id)
    if not suggestion:
        raise NotFoundError(f"Suggestion {suggestion_id} not found")

    if acting_user.id not in (suggestion.mentor_id, suggestion.mentee_id):
        raise AuthorizationError("Only the suggested mentor or mentee can respond")

    if suggestion.status != SuggestionStatus.PENDING:
        raise InvalidStateError(f"Suggestion is already {suggestion.status.value}")

    accept = decision is Decision.ACCEPT
    if accept and _has_open_mentorship(db, suggestion.mentor_id, suggestion.mentee_id):
        raise ConflictError("These users already have a pending or active mentorship")

    now = datetime.utcnow()
    try:
        # Compare-and-set: only one of two concurrent responders sees rowcount == 1
        result = db.execute(
            update(Suggestion)
            .where(Suggestion.id == suggestion.id, Suggestion.status == SuggestionStatus.PENDING)
            .values(
                status=SuggestionStatus.ACCEPTED if accept else SuggestionStatus.DECLINED,
                responded_at=now,
            )
        )
        if result.rowcount != 1:
            raise ConflictError("Suggestion was answered by a concurrent request")

        if accept:
            db.add(Mentorship(
                mentor_id=suggestion.mentor_id,
                mentee_id=suggestion.mentee_id,
                suggestion_id=suggestion.id,
                status=MentorshipStatus.PENDING,
                start_date=now,
            ))
            db.flush()

        db.commit()
    except ConflictError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[Suggestion] accept of {suggestion_id} lost a race: {e.orig}")
        raise ConflictError("These users already have a pending or active mentorship")

    db.refresh(suggestion)
    logger.info(f"[Suggestion] id={suggestion.id} {suggestion.status.value} by user={acting_user.id}")

    other_party = suggestion.mentee_id if acting_user.id == suggestion.mentor_id else suggestion.mentor_id
    payload = {"suggestion_id": suggestion.id, "responded_by": acting_user.id}
    if accept:
        payload["mentorship_id"] = suggestion.mentorship.id
    notify_safely(notifier, db, other_party, SUGGESTION_ACCEPTED if accept else SUGGESTION_DECLINED, payload)

    return suggestion


def generate_suggestions_for_user(
    db: Session,
    user: User,
    role: MatchRole = MatchRole.MENTEE,
    limit: Optional[int] = None,
    notifier=notification_service,
) -> List[Suggestion]:
    """
    Turns the user's top-K candidates into suggestions.
    A conflict on one pair is logged and skipped, the rest of the batch still runs.
    """
    role = MatchRole(role)
    limit = limit or settings.SUGGESTION_BATCH_SIZE

    pairs = []
    for scored in matching_engine.score_candidates(db, user, role):
        if len(pairs) >= limit:
            break
        if role is MatchRole.MENTEE:
            mentor, mentee = scored.candidate, user
        else:
            mentor, mentee = user, scored.candidate
        if _has_pending_suggestion(db, mentor.id, mentee.id):
            continue
        pairs.append((mentor, mentee))

    created = []
    for mentor, mentee in pairs:
        try:
            created.append(create_suggestion(db, mentor, mentee, notifier=notifier))
        except (ConflictError, InvalidStateError) as e:
            logger.warning(f"[Suggestion] skipped mentor={mentor.id} mentee={mentee.id}: {e.reason}")

    logger.info(f"[Suggestion] batch for user={user.id} role={role.value}: {len(created)}/{len(pairs)} created")
    return created


def list_suggestions_for_user(
    db: Session,
    user_id: str,
    status: Optional[SuggestionStatus] = None,
) -> List[Suggestion]:
    query = db.query(Suggestion).filter(
        or_(Suggestion.mentor_id == user_id, Suggestion.mentee_id == user_id)
    )
    if status is not None:
        query = query.filter(Suggestion.status == SuggestionStatus(status))
    return query.order_by(Suggestion.created_at.desc(), Suggestion.id.desc()).all()
