from . import crud_user
from . import crud_project
from . import crud_selection
from . import crud_booking
from . import crud_document
from . import crud_notification
from . import crud_chat
from . import crud_invite
