from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    JSON,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel, utcnow
from .types import ValueEnum, new_id


class SelectionGroupType(str, enum.Enum):
    INDIVIDUAL = "individual"
    GROUP = "group"


class SelectionGroup(BaseModel):
    """A unit of decision: one individual passenger or the pooled rest of the leg."""

    __tablename__ = "selection_groups"

    id = Column(String(36), primary_key=True, default=new_id)
    leg_id = Column(String(36), ForeignKey("legs.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(ValueEnum(SelectionGroupType, name="selection_group_type"), nullable=False)
    # Ordered list of tour_personnel ids
    passenger_ids = Column(JSON, nullable=False, default=list)
    label = Column(String, nullable=False)

    leg = relationship("Leg", back_populates="selection_groups")
    selections = relationship(
        "Selection",
        back_populates="selection_group",
        cascade="all, delete-orphan",
    )


class Selection(BaseModel):
    __tablename__ = "selections"
    __table_args__ = (
        # At most one active selection per group
        Index(
            "uq_selections_active_group",
            "selection_group_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    selection_group_id = Column(
        String(36), ForeignKey("selection_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    option_id = Column(String(36), ForeignKey("options.id", ondelete="CASCADE"), nullable=False, index=True)
    selected_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    price_snapshot = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(3), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    selected_at = Column(DateTime, nullable=False, default=utcnow)
    confirmed_at = Column(DateTime, nullable=True)

    selection_group = relationship("SelectionGroup", back_populates="selections")
    option = relationship("Option")
