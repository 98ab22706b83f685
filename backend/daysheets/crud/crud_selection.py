from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from .. import models
from ..models.base import utcnow


def get_selection_group(db: Session, group_id: str) -> Optional[models.SelectionGroup]:
    return (
        db.query(models.SelectionGroup)
        .options(joinedload(models.SelectionGroup.leg).joinedload(models.Leg.project))
        .filter(models.SelectionGroup.id == group_id)
        .first()
    )


def get_selection_groups_for_leg(db: Session, leg_id: str) -> List[models.SelectionGroup]:
    # "group" sorts before "individual"
    return (
        db.query(models.SelectionGroup)
        .filter(models.SelectionGroup.leg_id == leg_id)
        .order_by(models.SelectionGroup.type.asc(), models.SelectionGroup.label.asc())
        .all()
    )


def replace_selection_groups(
    db: Session, leg_id: str, groups: List[dict]
) -> List[models.SelectionGroup]:
    """Delete every group of the leg and insert ``groups``; no commit."""
    for existing in get_selection_groups_for_leg(db, leg_id):
        db.delete(existing)
    db.flush()
    created = [models.SelectionGroup(leg_id=leg_id, **g) for g in groups]
    db.add_all(created)
    db.flush()
    return created


def get_active_selection(db: Session, group_id: str) -> Optional[models.Selection]:
    return (
        db.query(models.Selection)
        .filter(
            models.Selection.selection_group_id == group_id,
            models.Selection.is_active.is_(True),
        )
        .first()
    )


def deactivate_selections(db: Session, group_id: str) -> int:
    return (
        db.query(models.Selection)
        .filter(
            models.Selection.selection_group_id == group_id,
            models.Selection.is_active.is_(True),
        )
        .update({models.Selection.is_active: False, models.Selection.updated_at: utcnow()}, synchronize_session="fetch")
    )


def create_selection(db: Session, **fields) -> models.Selection:
    selection = models.Selection(is_active=True, **fields)
    db.add(selection)
    db.flush()
    return selection


def get_active_selections_for_leg(db: Session, leg_id: str) -> List[models.Selection]:
    return (
        db.query(models.Selection)
        .join(models.SelectionGroup, models.SelectionGroup.id == models.Selection.selection_group_id)
        .options(joinedload(models.Selection.selection_group))
        .filter(
            models.SelectionGroup.leg_id == leg_id,
            models.Selection.is_active.is_(True),
        )
        .order_by(models.Selection.selected_at.asc())
        .all()
    )


def get_queue_selections(db: Session, artist_id: Optional[str] = None) -> List[models.Selection]:
    """Active selections with option, group, leg, project and artist loaded."""
    query = (
        db.query(models.Selection)
        .join(models.SelectionGroup, models.SelectionGroup.id == models.Selection.selection_group_id)
        .join(models.Leg, models.Leg.id == models.SelectionGroup.leg_id)
        .join(models.Project, models.Project.id == models.Leg.project_id)
        .options(
            joinedload(models.Selection.option),
            joinedload(models.Selection.selection_group)
            .joinedload(models.SelectionGroup.leg)
            .joinedload(models.Leg.project)
            .joinedload(models.Project.artist),
        )
        .filter(models.Selection.is_active.is_(True))
    )
    if artist_id:
        query = query.filter(models.Project.artist_id == artist_id)
    return query.all()
