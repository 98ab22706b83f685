from sqlalchemy import Boolean, Column, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel
from .types import new_id


class Artist(BaseModel):
    __tablename__ = "artists"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    projects = relationship("Project", back_populates="artist", cascade="all, delete-orphan")


class ArtistAssignment(BaseModel):
    """Maps a client user onto an artist they may see."""

    __tablename__ = "artist_assignments"
    __table_args__ = (UniqueConstraint("user_id", "artist_id", name="uq_artist_assignment"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    artist_id = Column(String(36), ForeignKey("artists.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)

    user = relationship("User", foreign_keys=[user_id], back_populates="artist_assignments")
    artist = relationship("Artist")
