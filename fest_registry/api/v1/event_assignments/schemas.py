from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from fest_registry.core.enums import AssignmentPersonType, EventRole


class EventCategoryResponse(BaseModel):
    slug: str
    table_name: str


class EventAssignmentCreate(BaseModel):
    person_id: int = Field(..., description="Student id or accompanist id, per person_type")
    person_type: AssignmentPersonType
    event_type: EventRole


class EventAssignmentResponse(BaseModel):
    id: int
    event_slug: str
    person_type: str
    person_id: int
    event_type: str
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime


class EventAssignmentsResponse(BaseModel):
    event_slug: str
    participants: List[EventAssignmentResponse]
    accompanists: List[EventAssignmentResponse]
