"""Partition a leg's passengers into selection groups."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.policies import Principal, authorize, require_artist_access
from ..crud import crud_project, crud_selection
from ..models import Leg, SelectionGroupType
from ..utils.errors import EmptyStateError, NotFoundError, PersistenceError
from ..utils.ids import ensure_uuid

logger = logging.getLogger(__name__)


def individual_label(full_name: str, leg: Leg) -> str:
    return f"{full_name} — {leg.route}"


def group_label(leg: Leg, count: int) -> str:
    return f"{leg.label or leg.route} — {count} passengers"


def partition_passengers(leg: Leg, assignments) -> List[dict]:
    """Individuals get one group each; everyone else shares a single group."""
    groups: List[dict] = []
    pooled: List[str] = []
    for assignment in assignments:
        if assignment.treat_as_individual:
            groups.append(
                {
                    "type": SelectionGroupType.INDIVIDUAL,
                    "passenger_ids": [assignment.passenger_id],
                    "label": individual_label(assignment.passenger.full_name, leg),
                }
            )
        else:
            pooled.append(assignment.passenger_id)
    if pooled:
        groups.append(
            {
                "type": SelectionGroupType.GROUP,
                "passenger_ids": pooled,
                "label": group_label(leg, len(pooled)),
            }
        )
    return groups


def seed_selection_groups(db: Session, principal: Optional[Principal], leg_id: str) -> dict:
    principal = authorize(principal, "selection_groups.seed")
    leg_id = ensure_uuid(leg_id, "leg_id")
    leg = crud_project.get_leg(db, leg_id)
    if leg is None:
        raise NotFoundError("Leg not found")
    require_artist_access(principal, leg.project.artist_id)

    assignments = crud_project.get_leg_passengers(db, leg_id)
    if not assignments:
        raise EmptyStateError("No passengers assigned to this leg")

    groups = partition_passengers(leg, assignments)
    try:
        # Delete and insert commit together; a failure leaves the old groups
        crud_selection.replace_selection_groups(db, leg_id, groups)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to seed selection groups for leg %s: %s", leg_id, exc, exc_info=True)
        raise PersistenceError(str(exc)) from exc

    individuals = sum(1 for g in groups if g["type"] == SelectionGroupType.INDIVIDUAL)
    grouped = len(groups) - individuals
    logger.info("Seeded %d selection groups for leg %s", len(groups), leg_id)
    return {
        "success": True,
        "created": len(groups),
        "details": {
            "individuals": individuals,
            "grouped": grouped,
            "totalPassengers": len(assignments),
        },
    }


def get_selection_groups_for_leg(db: Session, principal: Optional[Principal], leg_id: str) -> List[dict]:
    principal = authorize(principal, "selection_groups.view")
    leg_id = ensure_uuid(leg_id, "leg_id")
    leg = crud_project.get_leg(db, leg_id)
    if leg is None:
        raise NotFoundError("Leg not found")
    require_artist_access(principal, leg.project.artist_id)
    return [
        {
            "id": g.id,
            "leg_id": g.leg_id,
            "type": g.type,
            "passenger_ids": list(g.passenger_ids or []),
            "label": g.label,
            "active_selection": crud_selection.get_active_selection(db, g.id),
        }
        for g in crud_selection.get_selection_groups_for_leg(db, leg_id)
    ]
