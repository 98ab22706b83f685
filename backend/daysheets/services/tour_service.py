"""Staff-side tour setup: projects, legs, the people travelling and who sits on which leg."""

import logging
import re
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.policies import Principal, authorize
from ..crud import crud_project
from ..models import PARTIES, Artist, Leg, LegPassenger, Project, TourPersonnel
from ..schemas.project import LegCreate, PersonCreate, PersonUpdate, ProjectCreate
from ..utils.auth import normalize_email
from ..utils.errors import NotFoundError, PersistenceError, ValidationError
from ..utils.ids import ensure_uuid

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_PROJECT_NAME = 200
MIN_DESTINATION, MAX_DESTINATION = 2, 80
MIN_FULL_NAME, MAX_FULL_NAME = 3, 120
# field -> (max length, label used in messages)
OPTIONAL_PERSON_FIELDS = {
    "phone": (40, "Phone"),
    "seat_pref": (40, "Seat preference"),
    "ff_numbers": (200, "Frequent flyer numbers"),
    "notes": (1000, "Notes"),
    "role_title": (120, "Role title"),
}


def _commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to %s: %s", what, exc, exc_info=True)
        raise PersistenceError(str(exc)) from exc


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def _project(db: Session, project_id: str) -> Project:
    project = crud_project.get_project(db, ensure_uuid(project_id, "project_id"))
    if project is None:
        raise NotFoundError("Project not found")
    return project


def _leg(db: Session, leg_id: str) -> Leg:
    leg = crud_project.get_leg(db, ensure_uuid(leg_id, "leg_id"))
    if leg is None:
        raise NotFoundError("Leg not found")
    return leg


def list_artists(db: Session, principal: Optional[Principal], active_only: bool = True) -> List[Artist]:
    authorize(principal, "artists.view")
    return crud_project.get_artists(db, active_only)


def create_tour(db: Session, principal: Optional[Principal], payload: ProjectCreate) -> Project:
    principal = authorize(principal, "tours.manage")
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("Tour name is required", {"name": "required"})
    if len(name) > MAX_PROJECT_NAME:
        raise ValidationError("Tour name too long", {"name": f"max {MAX_PROJECT_NAME} characters"})
    artist_id = ensure_uuid(payload.artist_id, "artist_id")
    if payload.start_date and payload.end_date and payload.end_date < payload.start_date:
        raise ValidationError("End date must be after start date", {"end_date": "before start_date"})
    if crud_project.get_artist(db, artist_id) is None:
        raise NotFoundError("Artist not found or access denied")

    project = crud_project.create_project(
        db,
        artist_id=artist_id,
        name=name,
        description=_blank_to_none(payload.description),
        type=payload.type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_active=True,
        created_by=principal.user_id,
    )
    _commit(db, "create tour")
    logger.info("Created %s %s for artist %s", project.type.value, project.id, artist_id)
    return project


def create_leg(db: Session, principal: Optional[Principal], project_id: str, payload: LegCreate) -> Leg:
    """Append a leg to the project; ``leg_order`` continues from the last one."""
    principal = authorize(principal, "tours.manage")
    project = _project(db, project_id)
    destination = (payload.destination_city or "").strip()
    if len(destination) < MIN_DESTINATION:
        raise ValidationError(
            f"Destination must be at least {MIN_DESTINATION} characters", {"destination_city": "too short"}
        )
    if len(destination) > MAX_DESTINATION:
        raise ValidationError(
            f"Destination must be less than {MAX_DESTINATION} characters", {"destination_city": "too long"}
        )
    if payload.departure_date and payload.arrival_date and payload.arrival_date < payload.departure_date:
        raise ValidationError(
            "Arrival date must be on or after departure date", {"arrival_date": "before departure_date"}
        )

    leg = crud_project.create_leg(
        db,
        project_id=project.id,
        destination_city=destination,
        origin_city=_blank_to_none(payload.origin_city),
        label=_blank_to_none(payload.label),
        departure_date=payload.departure_date,
        arrival_date=payload.arrival_date,
        leg_order=crud_project.next_leg_order(db, project.id),
        created_by=principal.user_id,
    )
    _commit(db, "create leg")
    logger.info("Created leg %s (#%d) on project %s", leg.id, leg.leg_order, project.id)
    return leg


def _clean_person_fields(fields: dict) -> dict:
    """Validate the supplied personnel fields; absent keys stay absent."""
    cleaned = {}
    errors = {}
    if "full_name" in fields:
        full_name = " ".join((fields["full_name"] or "").split())
        if len(full_name) < MIN_FULL_NAME:
            errors["full_name"] = f"Full name must be at least {MIN_FULL_NAME} characters"
        elif len(full_name) > MAX_FULL_NAME:
            errors["full_name"] = f"Full name must be less than {MAX_FULL_NAME} characters"
        cleaned["full_name"] = full_name
    if "party" in fields:
        if fields["party"] not in PARTIES:
            errors["party"] = f"Party must be one of: {', '.join(PARTIES)}"
        cleaned["party"] = fields["party"]
    if "email" in fields:
        email = _blank_to_none(fields["email"])
        if email is not None:
            email = normalize_email(email)
            if not EMAIL_RE.match(email):
                errors["email"] = "Invalid email format"
        cleaned["email"] = email
    for name, (limit, label) in OPTIONAL_PERSON_FIELDS.items():
        if name not in fields:
            continue
        value = _blank_to_none(fields[name])
        if value is not None and len(value) > limit:
            errors[name] = f"{label} must be less than {limit} characters"
        cleaned[name] = value
    if "status" in fields and fields["status"] is not None:
        cleaned["status"] = fields["status"]
    if errors:
        raise ValidationError("Invalid personnel details", errors)
    return cleaned


def add_tour_person(
    db: Session, principal: Optional[Principal], project_id: str, payload: PersonCreate
) -> TourPersonnel:
    principal = authorize(principal, "tours.manage")
    project = _project(db, project_id)
    fields = payload.model_dump()
    if fields.get("party") is None:
        raise ValidationError("Party is required", {"party": "required"})
    cleaned = _clean_person_fields(fields)
    person = crud_project.create_person(db, project_id=project.id, created_by=principal.user_id, **cleaned)
    _commit(db, "add tour person")
    logger.info("Added %s to project %s", person.id, project.id)
    return person


def update_tour_person(
    db: Session, principal: Optional[Principal], person_id: str, payload: PersonUpdate
) -> TourPersonnel:
    authorize(principal, "tours.manage")
    person = crud_project.get_person(db, ensure_uuid(person_id, "person_id"))
    if person is None:
        raise NotFoundError("Person not found")
    cleaned = _clean_person_fields(payload.model_dump(exclude_unset=True))
    for key, value in cleaned.items():
        setattr(person, key, value)
    _commit(db, "update tour person")
    db.refresh(person)
    return person


def assign_passengers_to_leg(
    db: Session, principal: Optional[Principal], leg_id: str, passenger_ids: List[str]
) -> List[LegPassenger]:
    """Put the given people on the leg, resetting any existing assignment for them.

    Every passenger must belong to the leg's project. Re-assigning clears the
    individual flag. The whole batch lands in one transaction.
    """
    authorize(principal, "tours.manage")
    leg = _leg(db, leg_id)
    if not passenger_ids:
        raise ValidationError("At least one passenger is required", {"passenger_ids": "empty"})
    ids = list(dict.fromkeys(ensure_uuid(pid, "passenger_ids") for pid in passenger_ids))
    on_project = crud_project.get_project_personnel_ids(db, leg.project_id)
    foreign = [pid for pid in ids if pid not in on_project]
    if foreign:
        raise ValidationError(
            "Passenger does not belong to this project", {"passenger_ids": ", ".join(foreign)}
        )

    rows = crud_project.replace_leg_passengers(db, leg.id, ids)
    _commit(db, "assign passengers")
    logger.info("Assigned %d passenger(s) to leg %s", len(rows), leg.id)
    return rows


def _assignment(db: Session, leg_id: str, passenger_id: str) -> LegPassenger:
    leg = _leg(db, leg_id)
    assignment = crud_project.get_leg_passenger(db, leg.id, ensure_uuid(passenger_id, "passenger_id"))
    if assignment is None:
        raise NotFoundError("Passenger is not assigned to this leg")
    return assignment


def set_passenger_individual(
    db: Session, principal: Optional[Principal], leg_id: str, passenger_id: str, treat_as_individual: bool
) -> LegPassenger:
    authorize(principal, "tours.manage")
    assignment = _assignment(db, leg_id, passenger_id)
    assignment.treat_as_individual = treat_as_individual
    _commit(db, "update passenger flag")
    return assignment


def remove_passenger_from_leg(
    db: Session, principal: Optional[Principal], leg_id: str, passenger_id: str
) -> None:
    authorize(principal, "tours.manage")
    assignment = _assignment(db, leg_id, passenger_id)
    crud_project.delete_leg_passenger(db, assignment)
    _commit(db, "remove passenger")
    logger.info("Removed passenger %s from leg %s", passenger_id, leg_id)
