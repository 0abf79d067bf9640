"""
Notification service - tell people a request needs them or was decided.

Notifications go out after the state change has committed. They are best
effort: a failing sink is logged and never undoes or blocks the transition.
"""
import logging
from typing import List, Optional, Protocol
from sqlalchemy.orm import Session
from approval_engine.core.exceptions import ForbiddenError, NotFoundError
from approval_engine.models.notification import Notification, NotificationKind
from approval_engine.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


_MESSAGES = {
    NotificationKind.APPROVED: "Request {number} was approved",
    NotificationKind.REJECTED: "Request {number} was rejected",
    NotificationKind.AWAITING_APPROVAL: "Request {number} is waiting for your approval",
}


class NotificationSink(Protocol):
    def notify(self, recipient_id: int, kind: NotificationKind, request_id: int, message: str) -> None:
        ...


class DatabaseNotificationSink:
    """Stores in-app notifications; users read them from /notifications/me."""

    def __init__(self, db: Session):
        self.db = db

    def notify(self, recipient_id: int, kind: NotificationKind, request_id: int, message: str) -> None:
        self.db.add(Notification(
            recipient_id=recipient_id,
            kind=kind,
            request_id=request_id,
            message=message,
            read=False,
            created_at=now_utc(),
        ))
        self.db.commit()


class LoggingNotificationSink:
    def notify(self, recipient_id: int, kind: NotificationKind, request_id: int, message: str) -> None:
        logger.info(
            "notification: recipient_id=%s kind=%s request_id=%s message=%s",
            recipient_id, kind.value, request_id, message,
        )


def build_message(kind: NotificationKind, request_number: str, reason: Optional[str] = None) -> str:
    message = _MESSAGES[kind].format(number=request_number)
    if kind == NotificationKind.REJECTED and reason:
        message = f"{message}: {reason}"
    return message


def notify_safely(
    sink: NotificationSink,
    recipient_id: int,
    kind: NotificationKind,
    request_id: int,
    message: str,
    db: Optional[Session] = None,
) -> bool:
    """Deliver one notification; return False instead of raising when the sink fails."""
    try:
        sink.notify(recipient_id, kind, request_id, message)
        return True
    except Exception:
        logger.exception(
            "notification failed: recipient_id=%s kind=%s request_id=%s",
            recipient_id, kind.value, request_id,
        )
        if db is not None:
            db.rollback()
        return False


def list_my_notifications(
    db: Session,
    recipient_id: int,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    q = db.query(Notification).filter(Notification.recipient_id == recipient_id)
    if unread_only:
        q = q.filter(Notification.read == False)  # noqa: E712
    return q.order_by(Notification.id.desc()).limit(limit).all()


def mark_read(db: Session, notification_id: int, recipient_id: int) -> Notification:
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise NotFoundError(f"Notification with id {notification_id} not found")
    if notification.recipient_id != recipient_id:
        raise ForbiddenError("You can only mark your own notifications as read")
    notification.read = True
    db.commit()
    db.refresh(notification)
    return notification
