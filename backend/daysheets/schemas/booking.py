from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class HoldCreate(BaseModel):
    option_id: str
    passenger_id: str
    hours: Optional[int] = None


class HoldResponse(BaseModel):
    id: str
    option_id: str
    passenger_id: str
    expires_at: datetime

    model_config = {"from_attributes": True}


class TicketEntry(BaseModel):
    passengerId: str
    pnr: str
    pricePaid: Decimal
    currency: str = "USD"


class TicketBatch(BaseModel):
    option_id: str
    leg_id: str
    entries: List[TicketEntry] = Field(default_factory=list)
