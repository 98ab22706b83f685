from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel
from .types import ValueEnum, new_id


class ProjectType(str, enum.Enum):
    TOUR = "tour"
    EVENT = "event"


class PersonnelStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


# Travel parties a tour person belongs to
PARTIES = ("A Party", "B Party", "C Party", "D Party")


class Project(BaseModel):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)
    artist_id = Column(String(36), ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(ValueEnum(ProjectType, name="project_type"), nullable=False, default=ProjectType.TOUR)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    artist = relationship("Artist", back_populates="projects")
    legs = relationship(
        "Leg",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="Leg.leg_order",
    )
    personnel = relationship(
        "TourPersonnel",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="TourPersonnel.full_name",
    )


class Leg(BaseModel):
    """A single origin → destination movement within a project."""

    __tablename__ = "legs"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(String, nullable=True)
    origin_city = Column(String, nullable=True)
    destination_city = Column(String, nullable=True)
    departure_date = Column(Date, nullable=True)
    arrival_date = Column(Date, nullable=True)
    leg_order = Column(Integer, nullable=False, default=1)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    project = relationship("Project", back_populates="legs")
    passengers = relationship("LegPassenger", back_populates="leg", cascade="all, delete-orphan")
    options = relationship("Option", back_populates="leg", cascade="all, delete-orphan")
    selection_groups = relationship("SelectionGroup", back_populates="leg", cascade="all, delete-orphan")

    @property
    def route(self) -> str:
        return f"{self.origin_city or 'Origin'} → {self.destination_city or 'Destination'}"


class TourPersonnel(BaseModel):
    __tablename__ = "tour_personnel"

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String, nullable=False)
    party = Column(String(16), nullable=False, default=PARTIES[0])
    email = Column(String, nullable=True)
    phone = Column(String(40), nullable=True)
    seat_pref = Column(String(40), nullable=True)
    ff_numbers = Column(String(200), nullable=True)
    notes = Column(Text, nullable=True)
    role_title = Column(String, nullable=True)
    status = Column(
        ValueEnum(PersonnelStatus, name="personnel_status"),
        nullable=False,
        default=PersonnelStatus.ACTIVE,
    )
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    project = relationship("Project", back_populates="personnel")


class LegPassenger(BaseModel):
    """Assignment of a tour person to a leg."""

    __tablename__ = "leg_passengers"
    __table_args__ = (UniqueConstraint("leg_id", "passenger_id", name="uq_leg_passenger"),)

    id = Column(String(36), primary_key=True, default=new_id)
    leg_id = Column(String(36), ForeignKey("legs.id", ondelete="CASCADE"), nullable=False, index=True)
    passenger_id = Column(String(36), ForeignKey("tour_personnel.id", ondelete="CASCADE"), nullable=False)
    treat_as_individual = Column(Boolean, default=False, nullable=False)

    leg = relationship("Leg", back_populates="passengers")
    passenger = relationship("TourPersonnel")
