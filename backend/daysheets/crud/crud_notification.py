from typing import Iterable, List, Optional, Tuple

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from .. import models
from ..models.base import utcnow
from .base import insert_for


def create_event(db: Session, **fields) -> models.NotificationEvent:
    event = models.NotificationEvent(**fields)
    db.add(event)
    db.flush()
    return event


def _visible_events(db: Session, artist_ids: Optional[Iterable[str]], artist_id: Optional[str]):
    query = db.query(models.NotificationEvent)
    if artist_ids is not None:
        query = query.filter(models.NotificationEvent.artist_id.in_(list(artist_ids)))
    if artist_id:
        query = query.filter(models.NotificationEvent.artist_id == artist_id)
    return query


def _read_join(user_id: str):
    return and_(
        models.NotificationRead.event_id == models.NotificationEvent.id,
        models.NotificationRead.user_id == user_id,
    )


def get_unread_count(
    db: Session,
    user_id: str,
    artist_id: Optional[str] = None,
    artist_ids: Optional[Iterable[str]] = None,
) -> int:
    """Count events with no read row for ``user_id``.

    ``artist_ids`` restricts the visible events (clients); ``artist_id``
    narrows to one artist.
    """
    query = (
        _visible_events(db, artist_ids, artist_id)
        .outerjoin(models.NotificationRead, _read_join(user_id))
        .filter(models.NotificationRead.event_id.is_(None))
    )
    return query.with_entities(func.count(models.NotificationEvent.id)).scalar() or 0


def mark_read(db: Session, user_id: str, event_ids: List[str]) -> int:
    """Idempotently insert read rows; returns the number of ids submitted."""
    if not event_ids:
        return 0
    known = {
        r[0]
        for r in db.query(models.NotificationEvent.id)
        .filter(models.NotificationEvent.id.in_(event_ids))
        .all()
    }
    rows = [
        {"user_id": user_id, "event_id": eid, "read_at": utcnow(), "created_at": utcnow(), "updated_at": utcnow()}
        for eid in dict.fromkeys(event_ids)
        if eid in known
    ]
    if not rows:
        return 0
    stmt = insert_for(db, models.NotificationRead).values(rows)
    stmt = stmt.on_conflict_do_nothing(index_elements=["user_id", "event_id"])
    db.execute(stmt)
    return len(rows)


def get_recent(
    db: Session,
    user_id: str,
    limit: int = 20,
    artist_id: Optional[str] = None,
    artist_ids: Optional[Iterable[str]] = None,
    type: Optional[models.NotificationType] = None,
    severity: Optional[models.NotificationSeverity] = None,
) -> List[Tuple[models.NotificationEvent, bool]]:
    query = _visible_events(db, artist_ids, artist_id).outerjoin(
        models.NotificationRead, _read_join(user_id)
    )
    if type is not None:
        query = query.filter(models.NotificationEvent.type == type)
    if severity is not None:
        query = query.filter(models.NotificationEvent.severity == severity)
    rows = (
        query.add_columns(models.NotificationRead.event_id)
        .order_by(models.NotificationEvent.created_at.desc())
        .limit(limit)
        .all()
    )
    return [(event, read_id is not None) for event, read_id in rows]
