from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.project import PersonnelStatus, ProjectType


class ArtistSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class ProjectCreate(BaseModel):
    # Lengths and date order are checked in tour_service so failures answer 400
    name: Optional[str] = None
    description: Optional[str] = None
    artist_id: Optional[str] = None
    type: ProjectType = ProjectType.TOUR
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProjectResponse(BaseModel):
    id: str
    artist_id: str
    name: str
    description: Optional[str] = None
    type: ProjectType
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool

    model_config = {"from_attributes": True}


class LegCreate(BaseModel):
    destination_city: Optional[str] = None
    origin_city: Optional[str] = None
    label: Optional[str] = None
    departure_date: Optional[date] = None
    arrival_date: Optional[date] = None


class LegResponse(BaseModel):
    id: str
    project_id: str
    label: Optional[str] = None
    origin_city: Optional[str] = None
    destination_city: Optional[str] = None
    departure_date: Optional[date] = None
    arrival_date: Optional[date] = None
    leg_order: int

    model_config = {"from_attributes": True}


class PersonCreate(BaseModel):
    full_name: Optional[str] = None
    party: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    seat_pref: Optional[str] = None
    ff_numbers: Optional[str] = None
    notes: Optional[str] = None
    role_title: Optional[str] = None


class PersonUpdate(PersonCreate):
    """Partial update; only fields present in the body are applied."""

    status: Optional[PersonnelStatus] = None


class PersonResponse(BaseModel):
    id: str
    project_id: str
    full_name: str
    party: str
    email: Optional[str] = None
    phone: Optional[str] = None
    seat_pref: Optional[str] = None
    ff_numbers: Optional[str] = None
    notes: Optional[str] = None
    role_title: Optional[str] = None
    status: PersonnelStatus

    model_config = {"from_attributes": True}


class PassengerAssign(BaseModel):
    passenger_ids: List[str] = Field(default_factory=list)


class LegPassengerResponse(BaseModel):
    leg_id: str
    passenger_id: str
    treat_as_individual: bool

    model_config = {"from_attributes": True}


class PassengerFlagUpdate(BaseModel):
    treat_as_individual: bool
