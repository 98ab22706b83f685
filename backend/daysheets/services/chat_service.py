"""Per-leg chat between staff and clients."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.policies import Principal, authorize, require_artist_access
from ..crud import crud_chat, crud_project
from ..models import ChatMessage, Leg, NotificationType
from ..utils.errors import NotFoundError, PersistenceError, ValidationError
from ..utils.ids import ensure_uuid
from . import notification_service

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4000


def get_global_unread_count(db: Session, principal: Optional[Principal], artist_id: Optional[str] = None) -> int:
    """Unread chat messages across every leg for a staff user."""
    principal = authorize(principal, "chat.global_unread")
    if artist_id:
        artist_id = ensure_uuid(artist_id, "artist")
    try:
        return crud_chat.count_unread_for_user(db, principal.user_id, artist_id=artist_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Global unread count failed for %s: %s", principal.user_id, exc, exc_info=True)
        raise PersistenceError("Failed to count unread messages") from exc


def _leg_for(db: Session, principal: Principal, leg_id: str) -> Leg:
    leg = crud_project.get_leg(db, ensure_uuid(leg_id, "leg_id"))
    if leg is None:
        raise NotFoundError("Leg not found")
    require_artist_access(principal, leg.project.artist_id)
    return leg


def send_chat_message(db: Session, principal: Optional[Principal], leg_id: str, message: str) -> ChatMessage:
    principal = authorize(principal, "chat.use")
    text = (message or "").strip()
    if not text:
        raise ValidationError("Message cannot be empty", {"message": "required"})
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError("Message is too long", {"message": "too long"})
    leg = _leg_for(db, principal, leg_id)

    try:
        msg = crud_chat.create_message(
            db,
            leg_id=leg.id,
            user_id=principal.user_id,
            sender_role=principal.role.value,
            message=text,
        )
        if not principal.is_staff:
            notification_service.emit_notification(
                db,
                type=NotificationType.CHAT_MESSAGE,
                artist_id=leg.project.artist_id,
                project_id=leg.project_id,
                leg_id=leg.id,
                actor_user_id=principal.user_id,
                title="New client message",
                body="Client sent a message in leg chat",
            )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    db.refresh(msg)
    return msg


def list_chat_messages(
    db: Session, principal: Optional[Principal], leg_id: str, limit: int = 100
) -> List[ChatMessage]:
    principal = authorize(principal, "chat.use")
    leg = _leg_for(db, principal, leg_id)
    return crud_chat.list_messages(db, leg.id, limit=max(1, min(limit, 500)))


def mark_chat_read(db: Session, principal: Optional[Principal], leg_id: str) -> dict:
    principal = authorize(principal, "chat.use")
    leg = _leg_for(db, principal, leg_id)
    try:
        read_at = crud_chat.mark_leg_read(db, principal.user_id, leg.id)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    return {"success": True, "lastReadAt": read_at}
