"""Flight options offered on a leg, entered by hand or pasted from Navitas."""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.policies import Principal, authorize, require_artist_access
from ..crud import crud_project
from ..models import Option, OptionSource
from ..schemas.option import OptionCreate
from ..utils.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from ..utils.ids import ensure_uuid
from ..utils.time import compute_duration_min, parse_local_clock
from .navitas_parser import parse_navitas_text

logger = logging.getLogger(__name__)


def _segment_row(airline, number, date_raw, origin, destination, dep_raw, arr_raw, day_offset) -> dict:
    return {
        "airline_iata": airline.upper(),
        "flight_number": number,
        "departure_date_raw": date_raw,
        "origin_iata": origin.upper(),
        "destination_iata": destination.upper(),
        "dep_time_local": parse_local_clock(dep_raw),
        "arr_time_local": parse_local_clock(arr_raw),
        "day_offset": day_offset or 0,
        "duration_minutes": compute_duration_min(dep_raw, arr_raw, day_offset or 0),
    }


def _option_name(segments: List[dict]) -> str:
    flights = ", ".join(f"{s['airline_iata']}{s['flight_number']}" for s in segments)
    return f"{segments[0]['origin_iata']} → {segments[-1]['destination_iata']} ({flights})"


def options_from_navitas(text: str) -> List[dict]:
    """Option rows for every parsed block; raises when nothing usable was found."""
    parsed = parse_navitas_text(text)
    if not parsed["options"]:
        raise ValidationError(
            "No valid flight options found", {"navitas_text": "; ".join(parsed["errors"]) or "empty"}
        )
    rows = []
    for opt in parsed["options"]:
        segments = [
            _segment_row(
                s["airline"],
                s["flightNumber"],
                s["dateRaw"],
                s["origin"],
                s["destination"],
                s["depTimeRaw"],
                s["arrTimeRaw"],
                s["dayOffset"],
            )
            for s in opt["segments"]
        ]
        name = _option_name(segments)
        if opt["passenger"]:
            name = f"{opt['passenger']}: {name}"
        rows.append(
            {
                "name": name,
                "description": opt["raw"],
                "price_total": Decimal(str(opt["totalFare"])) if opt["totalFare"] is not None else None,
                "price_currency": (opt["currency"] or "USD").upper(),
                "source": OptionSource.NAVITAS,
                "reference": opt["reference"].upper() if opt["reference"] else None,
                "segments": segments,
            }
        )
    return rows


def _manual_option(payload: OptionCreate) -> dict:
    if not payload.segments:
        raise ValidationError("At least one segment is required", {"segments": "required"})
    segments = [
        _segment_row(
            s.airline_iata,
            s.flight_number,
            s.departure_date_raw,
            s.origin_iata,
            s.destination_iata,
            s.dep_time_raw,
            s.arr_time_raw,
            s.day_offset,
        )
        for s in payload.segments
    ]
    return {
        "name": (payload.name or "").strip() or _option_name(segments),
        "description": payload.description,
        "price_total": payload.price_total,
        "price_currency": payload.price_currency.upper(),
        "is_recommended": payload.is_recommended,
        "source": OptionSource.MANUAL,
        "segments": segments,
    }


def _leg_for(db: Session, principal: Principal, leg_id: str):
    leg = crud_project.get_leg(db, ensure_uuid(leg_id, "leg_id"))
    if leg is None:
        raise NotFoundError("Leg not found")
    require_artist_access(principal, leg.project.artist_id)
    return leg


def list_options(db: Session, principal: Optional[Principal], leg_id: str) -> List[Option]:
    principal = authorize(principal, "options.view")
    leg = _leg_for(db, principal, leg_id)
    return crud_project.get_options_for_leg(db, leg.id)


def create_options(
    db: Session, principal: Optional[Principal], leg_id: str, payload: OptionCreate
) -> List[Option]:
    principal = authorize(principal, "options.manage")
    leg = _leg_for(db, principal, leg_id)
    if payload.navitas_text:
        rows = options_from_navitas(payload.navitas_text)
        for row in rows:
            row["is_recommended"] = payload.is_recommended
    else:
        rows = [_manual_option(payload)]

    try:
        created = [crud_project.create_option(db, leg.id, **row) for row in rows]
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to create options for leg %s: %s", leg.id, exc, exc_info=True)
        raise PersistenceError(str(exc)) from exc
    for option in created:
        db.refresh(option)
    logger.info("Created %d option(s) for leg %s", len(created), leg.id)
    return created


def _option_for(db: Session, principal: Principal, option_id: str) -> Option:
    option = crud_project.get_option(db, ensure_uuid(option_id, "option_id"))
    if option is None:
        raise NotFoundError("Option not found")
    _leg_for(db, principal, option.leg_id)
    return option


def set_option_recommended(
    db: Session, principal: Optional[Principal], option_id: str, is_recommended: bool
) -> Option:
    principal = authorize(principal, "options.manage")
    option = _option_for(db, principal, option_id)
    option.is_recommended = is_recommended
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    db.refresh(option)
    return option


def delete_option(db: Session, principal: Optional[Principal], option_id: str) -> None:
    """Delete an option with its segments and holds.

    Options that are actively selected or already ticketed stay put.
    """
    principal = authorize(principal, "options.manage")
    option = _option_for(db, principal, option_id)
    if crud_project.option_in_use(db, option.id):
        raise ConflictError("Option is selected or ticketed and cannot be deleted")
    try:
        crud_project.delete_option(db, option)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to delete option %s: %s", option_id, exc, exc_info=True)
        raise PersistenceError(str(exc)) from exc
    logger.info("Deleted option %s", option_id)
