import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..core.policies import Principal
from ..database import get_db
from ..models import NotificationSeverity, NotificationType
from ..services import notification_service
from ..utils import error_response
from .dependencies import get_principal

router = APIRouter(tags=["notifications"])

logger = logging.getLogger(__name__)


@router.get("/notifications/unread-count")
def read_unread_count(
    artist: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    try:
        count = notification_service.get_unread_count(db, principal, artist)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Unread notification count failed: %s", exc, exc_info=True)
        count = 0
    return {"count": count}


@router.get("/notifications/recent")
def read_recent_notifications(
    limit: int = Query(20, ge=1, le=100),
    artist: Optional[str] = Query(None),
    type: Optional[NotificationType] = Query(None),
    severity: Optional[NotificationSeverity] = Query(None),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Newest events first, each flagged with the caller's read state."""
    try:
        rows = notification_service.get_recent_notifications(
            db, principal, limit=limit, artist_id=artist, type=type, severity=severity
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Recent notifications query failed: %s", exc, exc_info=True)
        rows = []
    return {"notifications": [schemas.NotificationResponse.model_validate(r) for r in rows]}


@router.post("/notifications/mark-read")
def mark_notifications_read(
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    event_ids = payload.get("eventIds")
    if not isinstance(event_ids, list):
        raise error_response("eventIds must be an array", {"eventIds": "must be a list"}, status.HTTP_400_BAD_REQUEST)
    marked = notification_service.mark_notifications_as_read(db, principal, [str(e) for e in event_ids])
    return {"success": True, "marked": marked}


@router.post("/notifications", status_code=status.HTTP_201_CREATED)
def push_notification(
    payload: schemas.NotificationCreate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    event_id = notification_service.push_notification(
        db,
        principal,
        type=payload.type,
        severity=payload.severity,
        artist_id=payload.artist_id,
        project_id=payload.project_id,
        leg_id=payload.leg_id,
        title=payload.title,
        body=payload.body,
    )
    return {"id": event_id}
