from .user import User, UserRole, UserStatus
from .artist import Artist, ArtistAssignment
from .project import Project, ProjectType, Leg, TourPersonnel, LegPassenger, PersonnelStatus, PARTIES
from .option import Option, OptionSegment, OptionSource
from .selection import SelectionGroup, SelectionGroupType, Selection
from .booking import Hold, Ticketing
from .document import TourDocument, DocumentKind
from .notification import (
    NotificationEvent,
    NotificationRead,
    NotificationType,
    NotificationSeverity,
)
from .chat import ChatMessage, ChatRead
from .invite import Invite

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "Artist",
    "ArtistAssignment",
    "Project",
    "ProjectType",
    "Leg",
    "TourPersonnel",
    "LegPassenger",
    "PersonnelStatus",
    "PARTIES",
    "Option",
    "OptionSegment",
    "OptionSource",
    "SelectionGroup",
    "SelectionGroupType",
    "Selection",
    "Hold",
    "Ticketing",
    "TourDocument",
    "DocumentKind",
    "NotificationEvent",
    "NotificationRead",
    "NotificationType",
    "NotificationSeverity",
    "ChatMessage",
    "ChatRead",
    "Invite",
]
