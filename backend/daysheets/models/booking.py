from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow
from .types import new_id


class Hold(BaseModel):
    """Time-boxed reservation on an option for one passenger.

    Expiry is evaluated at read time; nothing sweeps expired rows.
    """

    __tablename__ = "holds"

    id = Column(String(36), primary_key=True, default=new_id)
    option_id = Column(String(36), ForeignKey("options.id", ondelete="CASCADE"), nullable=False, index=True)
    passenger_id = Column(String(36), ForeignKey("tour_personnel.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    option = relationship("Option")


class Ticketing(BaseModel):
    __tablename__ = "ticketings"
    __table_args__ = (UniqueConstraint("leg_id", "passenger_id", name="uq_ticketing_leg_passenger"),)

    id = Column(String(36), primary_key=True, default=new_id)
    option_id = Column(String(36), ForeignKey("options.id", ondelete="CASCADE"), nullable=False, index=True)
    leg_id = Column(String(36), ForeignKey("legs.id", ondelete="CASCADE"), nullable=False, index=True)
    passenger_id = Column(String(36), ForeignKey("tour_personnel.id", ondelete="CASCADE"), nullable=False)
    pnr = Column(String(6), nullable=False)
    price_paid = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    ticketed_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    ticketed_at = Column(DateTime, nullable=False, default=utcnow)
