from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from .. import models


def get_project(db: Session, project_id: str) -> Optional[models.Project]:
    return db.query(models.Project).filter(models.Project.id == project_id).first()


def get_leg(db: Session, leg_id: str) -> Optional[models.Leg]:
    """Leg with its project eager-loaded (callers need project.artist_id)."""
    return (
        db.query(models.Leg)
        .options(joinedload(models.Leg.project))
        .filter(models.Leg.id == leg_id)
        .first()
    )


def get_leg_passengers(db: Session, leg_id: str) -> List[models.LegPassenger]:
    """Passenger assignments in a stable order (name, then id)."""
    return (
        db.query(models.LegPassenger)
        .join(models.TourPersonnel, models.TourPersonnel.id == models.LegPassenger.passenger_id)
        .options(joinedload(models.LegPassenger.passenger))
        .filter(models.LegPassenger.leg_id == leg_id)
        .order_by(models.TourPersonnel.full_name.asc(), models.TourPersonnel.id.asc())
        .all()
    )


def get_option(db: Session, option_id: str) -> Optional[models.Option]:
    return db.query(models.Option).filter(models.Option.id == option_id).first()


def get_options_for_leg(db: Session, leg_id: str) -> List[models.Option]:
    return (
        db.query(models.Option)
        .options(joinedload(models.Option.segments))
        .filter(models.Option.leg_id == leg_id)
        .order_by(models.Option.is_recommended.desc(), models.Option.created_at.asc())
        .all()
    )


def create_option(db: Session, leg_id: str, **fields) -> models.Option:
    segments = fields.pop("segments", [])
    option = models.Option(leg_id=leg_id, **fields)
    for order, seg in enumerate(segments):
        option.segments.append(models.OptionSegment(segment_order=order, **seg))
    db.add(option)
    db.flush()
    return option


def get_artists(db: Session, active_only: bool = True) -> List[models.Artist]:
    query = db.query(models.Artist)
    if active_only:
        query = query.filter(models.Artist.is_active.is_(True))
    return query.order_by(models.Artist.name.asc()).all()


def get_artist(db: Session, artist_id: str) -> Optional[models.Artist]:
    return db.query(models.Artist).filter(models.Artist.id == artist_id).first()


def create_project(db: Session, **fields) -> models.Project:
    project = models.Project(**fields)
    db.add(project)
    db.flush()
    return project


def next_leg_order(db: Session, project_id: str) -> int:
    current = (
        db.query(func.max(models.Leg.leg_order))
        .filter(models.Leg.project_id == project_id)
        .scalar()
    )
    return (current or 0) + 1


def create_leg(db: Session, **fields) -> models.Leg:
    leg = models.Leg(**fields)
    db.add(leg)
    db.flush()
    return leg


def get_person(db: Session, person_id: str) -> Optional[models.TourPersonnel]:
    return (
        db.query(models.TourPersonnel)
        .options(joinedload(models.TourPersonnel.project))
        .filter(models.TourPersonnel.id == person_id)
        .first()
    )


def get_project_personnel_ids(db: Session, project_id: str) -> set[str]:
    rows = db.query(models.TourPersonnel.id).filter(models.TourPersonnel.project_id == project_id).all()
    return {r[0] for r in rows}


def create_person(db: Session, **fields) -> models.TourPersonnel:
    person = models.TourPersonnel(**fields)
    db.add(person)
    db.flush()
    return person


def get_leg_passenger(db: Session, leg_id: str, passenger_id: str) -> Optional[models.LegPassenger]:
    return (
        db.query(models.LegPassenger)
        .filter(models.LegPassenger.leg_id == leg_id, models.LegPassenger.passenger_id == passenger_id)
        .first()
    )


def replace_leg_passengers(db: Session, leg_id: str, passenger_ids: List[str]) -> List[models.LegPassenger]:
    """Drop any existing rows for these passengers on the leg, then insert fresh ones."""
    (
        db.query(models.LegPassenger)
        .filter(models.LegPassenger.leg_id == leg_id, models.LegPassenger.passenger_id.in_(passenger_ids))
        .delete(synchronize_session=False)
    )
    db.flush()
    rows = [models.LegPassenger(leg_id=leg_id, passenger_id=pid, treat_as_individual=False) for pid in passenger_ids]
    db.add_all(rows)
    db.flush()
    return rows


def delete_leg_passenger(db: Session, assignment: models.LegPassenger) -> None:
    db.delete(assignment)
    db.flush()


def option_in_use(db: Session, option_id: str) -> bool:
    """True while an active selection or a ticket still points at the option."""
    selected = (
        db.query(models.Selection.id)
        .filter(models.Selection.option_id == option_id, models.Selection.is_active.is_(True))
        .first()
    )
    ticketed = db.query(models.Ticketing.id).filter(models.Ticketing.option_id == option_id).first()
    return selected is not None or ticketed is not None


def delete_option(db: Session, option: models.Option) -> None:
    # SQLite test databases do not enforce ON DELETE CASCADE
    db.query(models.Hold).filter(models.Hold.option_id == option.id).delete(synchronize_session=False)
    db.query(models.Selection).filter(models.Selection.option_id == option.id).delete(synchronize_session=False)
    db.delete(option)
    db.flush()
