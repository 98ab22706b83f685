# backend/daysheets/models/user.py

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship
from .base import BaseModel
from .types import ValueEnum, new_id
import enum


class UserRole(str, enum.Enum):
    """Enumeration of all supported user roles."""

    CLIENT = "client"
    AGENT = "agent"
    ADMIN = "admin"

    @property
    def is_staff(self) -> bool:
        return self in (UserRole.AGENT, UserRole.ADMIN)


class UserStatus(str, enum.Enum):
    INVITED = "invited"
    ACTIVE = "active"


class User(BaseModel):
    __tablename__ = "users"

    id              = Column(String(36), primary_key=True, default=new_id)
    email           = Column(String, unique=True, index=True, nullable=False)
    full_name       = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)
    role            = Column(ValueEnum(UserRole, name="user_role"), nullable=False, default=UserRole.CLIENT)
    status          = Column(ValueEnum(UserStatus, name="user_status"), nullable=False, default=UserStatus.ACTIVE)
    is_active       = Column(Boolean, default=True, nullable=False)

    # Artists a client user may see; staff are not scoped
    artist_assignments = relationship(
        "ArtistAssignment",
        foreign_keys="ArtistAssignment.user_id",
        back_populates="user",
        cascade="all, delete-orphan",
    )
