from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from .. import schemas
from ..core.policies import Principal
from ..database import get_db
from ..services import tour_service
from .dependencies import get_principal

router = APIRouter(tags=["tours"])


@router.get("/artists", response_model=List[schemas.ArtistSummary])
def read_artists(
    active: bool = Query(True, description="Only artists still on the roster"),
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return tour_service.list_artists(db, principal, active)


@router.post("/projects", response_model=schemas.ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: schemas.ProjectCreate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return tour_service.create_tour(db, principal, payload)


@router.post(
    "/projects/{project_id}/legs",
    response_model=schemas.LegResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_leg(
    project_id: str,
    payload: schemas.LegCreate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return tour_service.create_leg(db, principal, project_id, payload)


@router.post(
    "/projects/{project_id}/personnel",
    response_model=schemas.PersonResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_person(
    project_id: str,
    payload: schemas.PersonCreate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return tour_service.add_tour_person(db, principal, project_id, payload)


@router.patch("/personnel/{person_id}", response_model=schemas.PersonResponse)
def update_person(
    person_id: str,
    payload: schemas.PersonUpdate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return tour_service.update_tour_person(db, principal, person_id, payload)


@router.post("/legs/{leg_id}/passengers", response_model=List[schemas.LegPassengerResponse])
def assign_passengers(
    leg_id: str,
    payload: schemas.PassengerAssign,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    """Assign people to the leg; anyone already on it starts over as part of the group."""
    return tour_service.assign_passengers_to_leg(db, principal, leg_id, payload.passenger_ids)


@router.patch("/legs/{leg_id}/passengers/{passenger_id}", response_model=schemas.LegPassengerResponse)
def update_passenger_flag(
    leg_id: str,
    passenger_id: str,
    payload: schemas.PassengerFlagUpdate,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    return tour_service.set_passenger_individual(db, principal, leg_id, passenger_id, payload.treat_as_individual)


@router.delete("/legs/{leg_id}/passengers/{passenger_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_passenger(
    leg_id: str,
    passenger_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_principal),
):
    tour_service.remove_passenger_from_leg(db, principal, leg_id, passenger_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
