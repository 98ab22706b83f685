from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from ..models.selection import SelectionGroupType


class SelectOptionRequest(BaseModel):
    option_id: str


class SelectionResponse(BaseModel):
    id: str
    selection_group_id: str
    option_id: str
    selected_by: Optional[str] = None
    price_snapshot: Optional[Decimal] = None
    currency: Optional[str] = None
    is_active: bool
    selected_at: datetime
    confirmed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SelectionGroupResponse(BaseModel):
    id: str
    leg_id: str
    type: SelectionGroupType
    passenger_ids: List[str]
    label: str
    active_selection: Optional[SelectionResponse] = None

    model_config = {"from_attributes": True}
