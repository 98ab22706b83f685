from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel, utcnow
from .types import ValueEnum, new_id


class DocumentKind(str, enum.Enum):
    ITINERARY = "itinerary"
    INVOICE = "invoice"
    ETICKET = "eticket"
    OTHER = "other"


class TourDocument(BaseModel):
    __tablename__ = "tour_documents"
    __table_args__ = (
        Index("ix_tour_documents_project_kind_uploaded", "project_id", "kind", "uploaded_at"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    leg_id = Column(String(36), ForeignKey("legs.id", ondelete="SET NULL"), nullable=True)
    passenger_id = Column(String(36), ForeignKey("tour_personnel.id", ondelete="SET NULL"), nullable=True)
    kind = Column(ValueEnum(DocumentKind, name="document_kind"), nullable=False)
    title = Column(String(255), nullable=False)
    file_path = Column(String, nullable=False)
    uploaded_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    uploaded_at = Column(DateTime, nullable=False, default=utcnow)
    is_current = Column(Boolean, nullable=False, default=True)

    project = relationship("Project")
