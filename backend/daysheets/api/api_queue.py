from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..core.policies import Principal
from ..database import get_db
from ..services import booking_queue_service
from .dependencies import get_principal

router = APIRouter(tags=["queue"])


@router.get("/queue")
def read_booking_queue(
    artist: Optional[str] = Query(None, description="Only this artist's selections"),
    grouped: bool = Query(False, description="Bucket items by project and leg"),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Active selections awaiting booking, soonest-expiring holds first."""
    result = booking_queue_service.get_queue_selections(db, principal, artist)
    if grouped:
        result["projects"] = booking_queue_service.group_queue_items(result["selections"])
    return result


@router.post("/queue/holds", response_model=schemas.HoldResponse, status_code=status.HTTP_201_CREATED)
def create_hold(
    payload: schemas.HoldCreate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return booking_queue_service.place_hold(
        db, principal, payload.option_id, payload.passenger_id, payload.hours
    )


@router.post("/queue/ticket")
def mark_ticketed(
    payload: schemas.TicketBatch,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Record tickets for a batch of passengers in one transaction."""
    entries = [e.model_dump() for e in payload.entries]
    return booking_queue_service.mark_ticketed(db, principal, payload.option_id, payload.leg_id, entries)


@router.delete("/options/{option_id}/holds/{passenger_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_hold(
    option_id: str,
    passenger_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    booking_queue_service.remove_hold(db, principal, option_id, passenger_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
