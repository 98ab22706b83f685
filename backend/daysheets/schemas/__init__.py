from .user import Token, UserResponse, InviteCreate, InviteResponse, InviteAccept
from .selection import SelectOptionRequest, SelectionResponse, SelectionGroupResponse
from .booking import HoldCreate, HoldResponse, TicketEntry, TicketBatch
from .document import DocumentResponse, DocumentTitleUpdate
from .notification import NotificationCreate, NotificationResponse
from .chat import ChatMessageCreate, ChatMessageResponse
from .option import (
    SegmentCreate,
    OptionCreate,
    SegmentResponse,
    OptionResponse,
    NavitasParseRequest,
    OptionRecommendUpdate,
)
from .project import (
    ArtistSummary,
    ProjectCreate,
    ProjectResponse,
    LegCreate,
    LegResponse,
    PersonCreate,
    PersonUpdate,
    PersonResponse,
    PassengerAssign,
    LegPassengerResponse,
    PassengerFlagUpdate,
)
