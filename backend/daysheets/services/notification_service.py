"""Notification event log: immutable events plus per-user read markers."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.policies import Principal, authorize
from ..crud import crud_notification
from ..models import NotificationSeverity, NotificationType
from ..utils.errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)


def _artist_scope(principal: Principal) -> Optional[frozenset]:
    # Staff see every artist's events
    return None if principal.is_staff else principal.artist_ids


def emit_notification(
    db: Session,
    *,
    type: NotificationType,
    artist_id: str,
    title: str,
    body: Optional[str] = None,
    severity: NotificationSeverity = NotificationSeverity.INFO,
    project_id: Optional[str] = None,
    leg_id: Optional[str] = None,
    actor_user_id: Optional[str] = None,
) -> Optional[str]:
    """Best-effort emission used by other services.

    Runs inside a SAVEPOINT of the caller's transaction: on failure only the
    event is rolled back, the error is logged and None is returned.
    """
    try:
        with db.begin_nested():
            event = crud_notification.create_event(
                db,
                type=type,
                severity=severity,
                artist_id=artist_id,
                project_id=project_id,
                leg_id=leg_id,
                actor_user_id=actor_user_id,
                title=title,
                body=body,
            )
        return event.id
    except Exception as exc:
        logger.warning("Notification %s for artist %s not recorded: %s", type.value, artist_id, exc, exc_info=True)
        return None


def push_notification(
    db: Session,
    principal: Optional[Principal],
    *,
    type: NotificationType,
    artist_id: str,
    title: str,
    body: Optional[str] = None,
    severity: NotificationSeverity = NotificationSeverity.INFO,
    project_id: Optional[str] = None,
    leg_id: Optional[str] = None,
) -> str:
    principal = authorize(principal, "notifications.push")
    if not title or not title.strip():
        raise ValidationError("Title is required", {"title": "required"})
    try:
        event = crud_notification.create_event(
            db,
            type=type,
            severity=severity,
            artist_id=artist_id,
            project_id=project_id,
            leg_id=leg_id,
            actor_user_id=principal.user_id,
            title=title.strip(),
            body=body,
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to push notification: %s", exc, exc_info=True)
        raise PersistenceError(str(exc)) from exc
    return event.id


def get_unread_count(db: Session, principal: Optional[Principal], artist_id: Optional[str] = None) -> int:
    principal = authorize(principal, "notifications.view")
    return crud_notification.get_unread_count(
        db, principal.user_id, artist_id=artist_id, artist_ids=_artist_scope(principal)
    )


def mark_notifications_as_read(db: Session, principal: Optional[Principal], event_ids: List[str]) -> int:
    principal = authorize(principal, "notifications.view")
    if not event_ids:
        return 0
    try:
        count = crud_notification.mark_read(db, principal.user_id, event_ids)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    return count


def get_recent_notifications(
    db: Session,
    principal: Optional[Principal],
    limit: int = 20,
    artist_id: Optional[str] = None,
    type: Optional[NotificationType] = None,
    severity: Optional[NotificationSeverity] = None,
) -> List[dict]:
    principal = authorize(principal, "notifications.view")
    rows = crud_notification.get_recent(
        db,
        principal.user_id,
        limit=max(1, min(limit, 100)),
        artist_id=artist_id,
        artist_ids=_artist_scope(principal),
        type=type,
        severity=severity,
    )
    return [
        {
            "id": event.id,
            "type": event.type,
            "severity": event.severity,
            "artist_id": event.artist_id,
            "project_id": event.project_id,
            "leg_id": event.leg_id,
            "actor_user_id": event.actor_user_id,
            "title": event.title,
            "body": event.body,
            "created_at": event.created_at,
            "is_read": is_read,
        }
        for event, is_read in rows
    ]
