from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..core.policies import Principal, authorize
from ..database import get_db
from ..services import option_service
from ..services.navitas_parser import parse_navitas_text
from .dependencies import get_principal

router = APIRouter(tags=["options"])


@router.post("/navitas/parse")
def preview_navitas_parse(
    payload: schemas.NavitasParseRequest,
    principal: Optional[Principal] = Depends(get_principal),
):
    """Parse a Navitas paste without saving anything."""
    authorize(principal, "options.manage")
    return parse_navitas_text(payload.text)


@router.get("/legs/{leg_id}/options", response_model=List[schemas.OptionResponse])
def read_leg_options(
    leg_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return option_service.list_options(db, principal, leg_id)


@router.post(
    "/legs/{leg_id}/options",
    response_model=List[schemas.OptionResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_leg_options(
    leg_id: str,
    payload: schemas.OptionCreate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Create one option by hand, or one per block of pasted Navitas text."""
    return option_service.create_options(db, principal, leg_id, payload)


@router.patch("/options/{option_id}", response_model=schemas.OptionResponse)
def update_option_recommended(
    option_id: str,
    payload: schemas.OptionRecommendUpdate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return option_service.set_option_recommended(db, principal, option_id, payload.is_recommended)


@router.delete("/options/{option_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_option(
    option_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    option_service.delete_option(db, principal, option_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
