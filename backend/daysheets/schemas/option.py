from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.option import OptionSource


class SegmentCreate(BaseModel):
    airline_iata: str = Field(..., min_length=2, max_length=5)
    flight_number: str = Field(..., min_length=1, max_length=8)
    departure_date_raw: Optional[str] = None
    origin_iata: str = Field(..., min_length=3, max_length=3)
    destination_iata: str = Field(..., min_length=3, max_length=3)
    dep_time_raw: Optional[str] = None
    arr_time_raw: Optional[str] = None
    day_offset: int = 0


class OptionCreate(BaseModel):
    """Either explicit segments or Navitas text; text wins when both are sent."""

    name: Optional[str] = None
    description: Optional[str] = None
    price_total: Optional[Decimal] = None
    price_currency: str = "USD"
    is_recommended: bool = False
    segments: List[SegmentCreate] = Field(default_factory=list)
    navitas_text: Optional[str] = None


class SegmentResponse(BaseModel):
    id: str
    segment_order: int
    airline_iata: str
    flight_number: str
    departure_date_raw: Optional[str] = None
    origin_iata: str
    destination_iata: str
    dep_time_local: Optional[int] = None
    arr_time_local: Optional[int] = None
    day_offset: int
    duration_minutes: Optional[int] = None

    model_config = {"from_attributes": True}


class OptionResponse(BaseModel):
    id: str
    leg_id: str
    name: str
    description: Optional[str] = None
    price_total: Optional[Decimal] = None
    price_currency: str
    is_recommended: bool
    source: OptionSource
    reference: Optional[str] = None
    segments: List[SegmentResponse] = []

    model_config = {"from_attributes": True}


class NavitasParseRequest(BaseModel):
    text: str = ""


class OptionRecommendUpdate(BaseModel):
    is_recommended: bool
