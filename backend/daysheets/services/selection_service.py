"""Client selection of flight options per selection group."""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.policies import Principal, authorize, require_artist_access
from ..crud import crud_project, crud_selection
from ..models import NotificationType, SelectionGroupType
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


def select_option_for_group(
    db: Session,
    principal: Optional[Principal],
    selection_group_id: str,
    option_id: str,
) -> dict:
    """Record ``option_id`` as the active choice of a selection group.

    Any previous active selection of the group is deactivated in the same
    transaction; the price is snapshotted from the option.
    """
    selection_group_id = ensure_uuid(selection_group_id, "selection_group_id")
    option_id = ensure_uuid(option_id, "option_id")
    principal = authorize(principal, "selections.select")

    option = crud_project.get_option(db, option_id)
    if option is None:
        raise NotFoundError("Option not found")
    group = crud_selection.get_selection_group(db, selection_group_id)
    if group is None:
        raise NotFoundError("Selection group not found")
    if option.leg_id != group.leg_id:
        raise ValidationError("Option does not belong to this leg", {"option_id": "wrong leg"})
    project = group.leg.project
    require_artist_access(principal, project.artist_id)

    try:
        crud_selection.deactivate_selections(db, group.id)
        selection = crud_selection.create_selection(
            db,
            selection_group_id=group.id,
            option_id=option.id,
            selected_by=principal.user_id,
            price_snapshot=option.price_total,
            currency=option.price_currency,
        )
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Concurrent selection for group %s: %s", group.id, exc)
        raise ConflictError("Selection changed concurrently, please retry") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to record selection for group %s: %s", group.id, exc, exc_info=True)
        raise PersistenceError(str(exc)) from exc

    notification_service.emit_notification(
        db,
        type=NotificationType.CLIENT_SELECTION,
        artist_id=project.artist_id,
        project_id=project.id,
        leg_id=group.leg_id,
        actor_user_id=principal.user_id,
        title="New Client Selection",
        body=f"{group.label}: {option.name}",
    )

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Selection changed concurrently, please retry") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError(str(exc)) from exc
    logger.info("Group %s selected option %s", group.id, option.id)
    return {"success": True, "selectionId": selection.id}


def get_active_selections_for_leg(db: Session, principal: Optional[Principal], leg_id: str) -> List:
    principal = authorize(principal, "selections.view")
    leg_id = ensure_uuid(leg_id, "leg_id")
    leg = crud_project.get_leg(db, leg_id)
    if leg is None:
        raise NotFoundError("Leg not found")
    require_artist_access(principal, leg.project.artist_id)
    return crud_selection.get_active_selections_for_leg(db, leg_id)


def confirm_group_selection(db: Session, principal: Optional[Principal], leg_id: str) -> dict:
    """Confirm the pooled group's current choice; repeated calls are no-ops."""
    leg_id = ensure_uuid(leg_id, "leg_id")
    principal = authorize(principal, "selections.confirm")
    leg = crud_project.get_leg(db, leg_id)
    if leg is None:
        raise NotFoundError("Leg not found")
    require_artist_access(principal, leg.project.artist_id)

    group = next(
        (g for g in crud_selection.get_selection_groups_for_leg(db, leg_id) if g.type == SelectionGroupType.GROUP),
        None,
    )
    selection = crud_selection.get_active_selection(db, group.id) if group else None
    if selection is None:
        raise ValidationError("No group selection to confirm")

    already = selection.confirmed_at is not None
    if not already:
        selection.confirmed_at = utcnow()
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(str(exc)) from exc
    return {
        "success": True,
        "confirmedPassengers": len(group.passenger_ids or []),
        "alreadyConfirmed": already,
    }
