"""Booking queue: confirmed selections awaiting holds and ticketing."""

import logging
import re
from collections import OrderedDict, defaultdict
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.policies import Principal, authorize
from ..crud import crud_booking, crud_project, crud_selection
from ..models import NotificationSeverity, NotificationType
from ..models.base import utcnow
from ..utils.errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from ..utils.ids import ensure_uuid
from . import notification_service

logger = logging.getLogger(__name__)

PNR_RE = re.compile(r"^[A-Z0-9]{6}$")
MIN_HOLD_HOURS = 1
MAX_HOLD_HOURS = 72
CENT = Decimal("0.01")


def _queue_sort_key(item: dict):
    expiry = item["holds"][0]["expires_at"] if item["holds"] else None
    departure = item["leg"]["departure_date"]
    return (
        expiry is None,
        expiry or datetime.max,
        departure is None,
        departure or date.max,
        item["selected_at"],
    )


def sort_queue_items(items: List[dict]) -> List[dict]:
    """Held items first (soonest expiry), then by departure, then selection time."""
    return sorted(items, key=_queue_sort_key)


def group_queue_items(items: Iterable[dict]) -> List[dict]:
    """Bucket already-ordered items into project → leg, keeping first-seen order."""
    projects: "OrderedDict[str, dict]" = OrderedDict()
    for item in items:
        project = projects.setdefault(
            item["project"]["id"],
            {"project": item["project"], "artist": item["artist"], "legs": OrderedDict()},
        )
        leg = project["legs"].setdefault(item["leg"]["id"], {"leg": item["leg"], "items": []})
        leg["items"].append(item)
    return [
        {"project": p["project"], "artist": p["artist"], "legs": list(p["legs"].values())}
        for p in projects.values()
    ]


def _build_items(db: Session, selections, now: datetime) -> List[dict]:
    holds_by_option = defaultdict(list)
    for hold in crud_booking.get_open_holds(db, (s.option_id for s in selections), now):
        holds_by_option[hold.option_id].append(hold)
    ticketed_by_leg = defaultdict(set)
    for t in crud_booking.get_ticketings_for_legs(db, (s.selection_group.leg_id for s in selections)):
        ticketed_by_leg[t.leg_id].add(t.passenger_id)

    items = []
    for s in selections:
        group = s.selection_group
        leg = group.leg
        project = leg.project
        passengers = list(group.passenger_ids or [])
        members = set(passengers)
        holds = [h for h in holds_by_option[s.option_id] if h.passenger_id in members]
        items.append(
            {
                "id": s.id,
                "selection_group_id": group.id,
                "group_label": group.label,
                "group_type": group.type,
                "passenger_ids": passengers,
                "price_snapshot": s.price_snapshot,
                "currency": s.currency,
                "selected_at": s.selected_at,
                "confirmed_at": s.confirmed_at,
                "option": {
                    "id": s.option.id,
                    "name": s.option.name,
                    "price_total": s.option.price_total,
                    "price_currency": s.option.price_currency,
                },
                "leg": {
                    "id": leg.id,
                    "label": leg.label,
                    "origin_city": leg.origin_city,
                    "destination_city": leg.destination_city,
                    "departure_date": leg.departure_date,
                },
                "project": {"id": project.id, "name": project.name},
                "artist": {"id": project.artist.id, "name": project.artist.name},
                "holds": [
                    {"id": h.id, "passenger_id": h.passenger_id, "expires_at": h.expires_at}
                    for h in holds
                ],
                "ticketedCount": len(members & ticketed_by_leg[leg.id]),
                "totalPassengers": len(passengers),
            }
        )
    return items


def get_queue_selections(
    db: Session, principal: Optional[Principal], artist_id: Optional[str] = None
) -> dict:
    """Return ``{selections, totalCount}``; degrades to an empty queue on DB errors."""
    authorize(principal, "queue.view")
    try:
        selections = crud_selection.get_queue_selections(db, artist_id)
        items = sort_queue_items(_build_items(db, selections, utcnow()))
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Booking queue query failed: %s", exc, exc_info=True)
        return {"selections": [], "totalCount": 0}
    return {"selections": items, "totalCount": len(items)}


def place_hold(
    db: Session,
    principal: Optional[Principal],
    option_id: str,
    passenger_id: str,
    hours: Optional[int] = None,
):
    principal = authorize(principal, "queue.hold")
    option_id = ensure_uuid(option_id, "option_id")
    passenger_id = ensure_uuid(passenger_id, "passenger_id")
    hours = settings.HOLD_DEFAULT_HOURS if hours is None else hours
    if not MIN_HOLD_HOURS <= hours <= MAX_HOLD_HOURS:
        raise ValidationError(
            f"Hold duration must be between {MIN_HOLD_HOURS} and {MAX_HOLD_HOURS} hours",
            {"hours": "out of range"},
        )

    option = crud_project.get_option(db, option_id)
    if option is None:
        raise NotFoundError("Option not found")
    leg = crud_project.get_leg(db, option.leg_id)
    if passenger_id not in {a.passenger_id for a in crud_project.get_leg_passengers(db, leg.id)}:
        raise ValidationError("Passenger is not assigned to this leg", {"passenger_id": "not on leg"})

    try:
        hold = crud_booking.create_hold(
            db,
            option_id=option.id,
            passenger_id=passenger_id,
            expires_at=utcnow() + timedelta(hours=hours),
            created_by=principal.user_id,
        )
        notification_service.emit_notification(
            db,
            type=NotificationType.HOLD_EXPIRING,
            severity=NotificationSeverity.WARNING,
            artist_id=leg.project.artist_id,
            project_id=leg.project_id,
            leg_id=leg.id,
            actor_user_id=principal.user_id,
            title="Flight hold placed",
            body=f"Hold on {option.name} expires in {hours}h",
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    return hold


def validate_ticket_batch(entries: List[dict]) -> List[dict]:
    """Normalise and validate a ticketing batch as a whole; no I/O."""
    if not entries:
        raise ValidationError("At least one passenger is required", {"entries": "empty"})
    errors = {}
    seen_pnrs = set()
    seen_passengers = set()
    cleaned = []
    for idx, entry in enumerate(entries):
        passenger_id = ensure_uuid(entry.get("passengerId"), "passengerId")
        pnr = (entry.get("pnr") or "").strip().upper()
        currency = (entry.get("currency") or "USD").strip().upper()
        try:
            # stored as Numeric(12, 2)
            price = Decimal(str(entry.get("pricePaid"))).quantize(CENT, rounding=ROUND_HALF_UP)
        except ArithmeticError:
            price = Decimal(0)
        if not PNR_RE.match(pnr):
            errors[f"entries.{idx}.pnr"] = "PNR must be exactly 6 characters"
        elif pnr in seen_pnrs:
            errors[f"entries.{idx}.pnr"] = "PNR must be unique per passenger"
        if not price.is_finite() or price <= 0:
            errors[f"entries.{idx}.pricePaid"] = "Price must be greater than 0"
        if passenger_id in seen_passengers:
            errors[f"entries.{idx}.passengerId"] = "Passenger listed twice"
        if len(currency) != 3:
            errors[f"entries.{idx}.currency"] = "Currency must be a 3-letter code"
        seen_pnrs.add(pnr)
        seen_passengers.add(passenger_id)
        cleaned.append({"passenger_id": passenger_id, "pnr": pnr, "price_paid": price, "currency": currency})
    if errors:
        raise ValidationError("Invalid ticketing details", errors)
    return cleaned


def mark_ticketed(
    db: Session,
    principal: Optional[Principal],
    option_id: str,
    leg_id: str,
    entries: List[dict],
) -> dict:
    """Ticket a batch of passengers atomically.

    The batch is validated before any write and written in one transaction.
    Selections whose passengers are now all ticketed leave the queue.
    """
    principal = authorize(principal, "queue.ticket")
    option_id = ensure_uuid(option_id, "option_id")
    leg_id = ensure_uuid(leg_id, "leg_id")
    cleaned = validate_ticket_batch(entries)

    option = crud_project.get_option(db, option_id)
    if option is None:
        raise NotFoundError("Option not found")
    if option.leg_id != leg_id:
        raise ValidationError("Option does not belong to this leg", {"option_id": "wrong leg"})
    on_leg = {a.passenger_id for a in crud_project.get_leg_passengers(db, leg_id)}
    missing = [e["passenger_id"] for e in cleaned if e["passenger_id"] not in on_leg]
    if missing:
        raise ValidationError("Passenger is not assigned to this leg", {"passengerId": ", ".join(missing)})
    already = crud_booking.get_ticketed_passenger_ids(db, leg_id)
    if any(e["passenger_id"] in already for e in cleaned):
        raise ConflictError("Passenger is already ticketed for this leg")

    try:
        crud_booking.create_ticketings(
            db,
            [dict(e, option_id=option_id, leg_id=leg_id, ticketed_by=principal.user_id) for e in cleaned],
        )
        ticketed = already | {e["passenger_id"] for e in cleaned}
        for selection in crud_selection.get_active_selections_for_leg(db, leg_id):
            if set(selection.selection_group.passenger_ids or []) <= ticketed:
                selection.is_active = False
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Passenger is already ticketed for this leg") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Ticketing batch failed for leg %s: %s", leg_id, exc, exc_info=True)
        raise PersistenceError(str(exc)) from exc
    logger.info("Ticketed %d passengers on leg %s", len(cleaned), leg_id)
    return {"success": True, "ticketed": len(cleaned)}


def remove_hold(db: Session, principal: Optional[Principal], option_id: str, passenger_id: str) -> int:
    """Release every hold the passenger has on the option, expired or not."""
    authorize(principal, "queue.hold")
    option_id = ensure_uuid(option_id, "option_id")
    passenger_id = ensure_uuid(passenger_id, "passenger_id")
    try:
        removed = crud_booking.delete_holds(db, option_id, passenger_id)
        if not removed:
            raise NotFoundError("Hold not found")
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    logger.info("Released %d hold(s) on option %s for passenger %s", removed, option_id, passenger_id)
    return removed
