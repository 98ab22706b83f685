from datetime import datetime
from typing import Iterable, List

from sqlalchemy.orm import Session

from .. import models


def create_hold(db: Session, **fields) -> models.Hold:
    hold = models.Hold(**fields)
    db.add(hold)
    db.flush()
    return hold


def get_open_holds(
    db: Session, option_ids: Iterable[str], now: datetime
) -> List[models.Hold]:
    option_ids = list(set(option_ids))
    if not option_ids:
        return []
    return (
        db.query(models.Hold)
        .filter(models.Hold.option_id.in_(option_ids), models.Hold.expires_at > now)
        .order_by(models.Hold.expires_at.asc())
        .all()
    )


def get_ticketings_for_legs(db: Session, leg_ids: Iterable[str]) -> List[models.Ticketing]:
    leg_ids = list(set(leg_ids))
    if not leg_ids:
        return []
    return db.query(models.Ticketing).filter(models.Ticketing.leg_id.in_(leg_ids)).all()


def get_ticketed_passenger_ids(db: Session, leg_id: str) -> set[str]:
    rows = db.query(models.Ticketing.passenger_id).filter(models.Ticketing.leg_id == leg_id).all()
    return {r[0] for r in rows}


def create_ticketings(db: Session, rows: List[dict]) -> List[models.Ticketing]:
    objs = [models.Ticketing(**row) for row in rows]
    db.add_all(objs)
    db.flush()
    return objs


def delete_holds(db: Session, option_id: str, passenger_id: str) -> int:
    count = (
        db.query(models.Hold)
        .filter(models.Hold.option_id == option_id, models.Hold.passenger_id == passenger_id)
        .delete(synchronize_session=False)
    )
    db.flush()
    return count
