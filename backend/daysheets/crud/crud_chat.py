from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from .. import models
from ..models.base import utcnow
from .base import insert_for

EPOCH = datetime(1970, 1, 1)


def create_message(db: Session, **fields) -> models.ChatMessage:
    msg = models.ChatMessage(**fields)
    db.add(msg)
    db.flush()
    return msg


def list_messages(db: Session, leg_id: str, limit: int = 100) -> List[models.ChatMessage]:
    rows = (
        db.query(models.ChatMessage)
        .filter(models.ChatMessage.leg_id == leg_id)
        .order_by(models.ChatMessage.created_at.desc())
        .limit(limit)
        .all()
    )
    return list(reversed(rows))


def mark_leg_read(db: Session, user_id: str, leg_id: str) -> datetime:
    now = utcnow()
    stmt = insert_for(db, models.ChatRead).values(
        user_id=user_id, leg_id=leg_id, last_read_at=now, created_at=now, updated_at=now
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "leg_id"],
        set_={"last_read_at": now, "updated_at": now},
    )
    db.execute(stmt)
    return now


def count_unread_for_user(db: Session, user_id: str, artist_id: Optional[str] = None) -> int:
    """Messages newer than the user's per-leg read marker, summed over legs."""
    query = (
        db.query(func.count(models.ChatMessage.id))
        .join(models.Leg, models.Leg.id == models.ChatMessage.leg_id)
        .outerjoin(
            models.ChatRead,
            and_(
                models.ChatRead.leg_id == models.ChatMessage.leg_id,
                models.ChatRead.user_id == user_id,
            ),
        )
        .filter(models.ChatMessage.created_at > func.coalesce(models.ChatRead.last_read_at, EPOCH))
    )
    if artist_id:
        query = query.join(models.Project, models.Project.id == models.Leg.project_id).filter(
            models.Project.artist_id == artist_id
        )
    return query.scalar() or 0
