import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.db.models.job import BackgroundJob
from app.db.models.user import User

logger = logging.getLogger(__name__)

# Events emitted by the matching core
SUGGESTION_CREATED = "suggestion.created"
SUGGESTION_ACCEPTED = "suggestion.accepted"
SUGGESTION_DECLINED = "suggestion.declined"
MENTORSHIP_STATUS_CHANGED = "mentorship.status_changed"


class NotificationService:
    """
    Hands events to the delivery worker by enqueueing a BackgroundJob.

    Fire-and-forget from the caller's point of view: the caller's own
    transaction is already committed, so a failure here is logged and
    rolled back on its own without touching it.
    """

    task_type = "notify"

    def notify(self, db: Session, user_id: str, event: str, payload: Optional[dict] = None) -> bool:
        try:
            user = db.get(User, user_id)
            if not user:
                logger.warning(f"[Notify] unknown user {user_id}, dropping {event}")
                return False

            # Preferences are opt-out: {"suggestion.created": false} silences that event
            preferences = user.notification_preferences or {}
            if preferences.get(event, True) is False:
                logger.info(f"[Notify] user={user_id} opted out of {event}")
                return False

            job = BackgroundJob(
                task_type=self.task_type,
                payload={"user_id": user_id, "event": event, "data": payload or {}},
            )
            db.add(job)
            db.commit()
            logger.info(f"JOB ENQUEUED: {event} to user {user_id}")
            return True

        except Exception as e:
            db.rollback()
            logger.warning(f"[Notify] failed to enqueue {event} for user {user_id}: {e}")
            return False


notification_service = NotificationService()


def notify_safely(notifier, db: Session, user_id: str, event: str, payload: Optional[dict] = None) -> bool:
    """
    Calls notifier.notify after the caller has committed. Whatever the notifier
    raises is logged and dropped; the committed change stays.
    """
    try:
        return bool(notifier.notify(db, user_id, event, payload))
    except Exception as e:
        db.rollback()
        logger.warning(f"[Notify] notifier failed on {event} for user {user_id}: {e}")
        return False
