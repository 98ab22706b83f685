from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..models.document import DocumentKind


class DocumentResponse(BaseModel):
    id: str
    project_id: str
    leg_id: Optional[str] = None
    passenger_id: Optional[str] = None
    kind: DocumentKind
    title: str
    file_path: str
    uploaded_by: Optional[str] = None
    uploaded_at: datetime
    is_current: bool

    model_config = {"from_attributes": True}


class DocumentTitleUpdate(BaseModel):
    title: str
