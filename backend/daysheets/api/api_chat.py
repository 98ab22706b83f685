from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import schemas
from ..core.policies import Principal
from ..database import get_db
from ..services import chat_service
from .dependencies import get_principal

router = APIRouter(tags=["chat"])


@router.get("/chat/global-unread")
def read_global_unread(
    artist: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Unread leg-chat messages across all legs (staff only)."""
    return {"total": chat_service.get_global_unread_count(db, principal, artist)}


@router.get("/chat/legs/{leg_id}/messages", response_model=List[schemas.ChatMessageResponse])
def read_leg_messages(
    leg_id: str,
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return chat_service.list_chat_messages(db, principal, leg_id, limit)


@router.post(
    "/chat/legs/{leg_id}/messages",
    response_model=schemas.ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def send_leg_message(
    leg_id: str,
    payload: schemas.ChatMessageCreate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return chat_service.send_chat_message(db, principal, leg_id, payload.message)


@router.post("/chat/legs/{leg_id}/read")
def mark_leg_read(
    leg_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return chat_service.mark_chat_read(db, principal, leg_id)
