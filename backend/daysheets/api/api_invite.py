from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..core.policies import Principal
from ..database import get_db
from ..services import invite_service
from .dependencies import get_principal

router = APIRouter(tags=["invites"])


@router.post("/invites", response_model=schemas.InviteResponse, status_code=status.HTTP_201_CREATED)
def create_invite(
    payload: schemas.InviteCreate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return invite_service.create_invite(db, principal, payload.email, payload.role, payload.artist_ids)


@router.get("/invites/validate")
def validate_invite(token: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """Check an invite token before showing the sign-up form."""
    return invite_service.validate_invite(db, token)


@router.post("/invites/accept")
def accept_invite(payload: schemas.InviteAccept, db: Session = Depends(get_db)):
    return invite_service.accept_invite(db, payload.token, payload.password, payload.fullName)
