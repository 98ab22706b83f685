from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import schemas
from ..core.policies import Principal
from ..database import get_db
from ..services import selection_group_service, selection_service
from .dependencies import get_principal

router = APIRouter(tags=["selections"])


@router.post("/selection-groups/{group_id}/select")
def select_option(
    group_id: str,
    payload: schemas.SelectOptionRequest,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Choose an option for a selection group, replacing any earlier choice."""
    return selection_service.select_option_for_group(db, principal, group_id, payload.option_id)


@router.get("/legs/{leg_id}/selections/active", response_model=List[schemas.SelectionResponse])
def read_active_selections(
    leg_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return selection_service.get_active_selections_for_leg(db, principal, leg_id)


@router.post("/legs/{leg_id}/confirm-group")
def confirm_group(
    leg_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return selection_service.confirm_group_selection(db, principal, leg_id)


@router.post("/legs/{leg_id}/selection-groups", status_code=status.HTTP_201_CREATED)
def seed_selection_groups(
    leg_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Rebuild the leg's selection groups from its passenger list."""
    return selection_group_service.seed_selection_groups(db, principal, leg_id)


@router.get("/legs/{leg_id}/selection-groups", response_model=List[schemas.SelectionGroupResponse])
def read_selection_groups(
    leg_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return selection_group_service.get_selection_groups_for_leg(db, principal, leg_id)
