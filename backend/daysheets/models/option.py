from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel
from .types import ValueEnum, new_id


class OptionSource(str, enum.Enum):
    MANUAL = "manual"
    NAVITAS = "navitas"


class Option(BaseModel):
    """A candidate itinerary offered for a leg."""

    __tablename__ = "options"

    id = Column(String(36), primary_key=True, default=new_id)
    leg_id = Column(String(36), ForeignKey("legs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price_total = Column(Numeric(12, 2), nullable=True)
    price_currency = Column(String(3), nullable=False, default="USD")
    is_recommended = Column(Boolean, default=False, nullable=False)
    source = Column(ValueEnum(OptionSource, name="option_source"), nullable=False, default=OptionSource.MANUAL)
    reference = Column(String(6), nullable=True)

    leg = relationship("Leg", back_populates="options")
    segments = relationship(
        "OptionSegment",
        back_populates="option",
        cascade="all, delete-orphan",
        order_by="OptionSegment.segment_order",
    )


class OptionSegment(BaseModel):
    __tablename__ = "option_segments"

    id = Column(String(36), primary_key=True, default=new_id)
    option_id = Column(String(36), ForeignKey("options.id", ondelete="CASCADE"), nullable=False, index=True)
    segment_order = Column(Integer, nullable=False, default=0)
    airline_iata = Column(String(5), nullable=False)
    flight_number = Column(String(8), nullable=False)
    departure_date_raw = Column(String(8), nullable=True)
    origin_iata = Column(String(3), nullable=False)
    destination_iata = Column(String(3), nullable=False)
    # Minutes since local midnight, as printed on the itinerary
    dep_time_local = Column(Integer, nullable=True)
    arr_time_local = Column(Integer, nullable=True)
    day_offset = Column(Integer, nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=True)

    option = relationship("Option", back_populates="segments")
