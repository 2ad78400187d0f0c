from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ApplicationApprove(BaseModel):
    """Approve a submitted application; optionally assign the student to events in the same step."""

    participating_events: List[str] = Field(default_factory=list, description="Event slugs to join as PARTICIPANT")
    accompanying_events: List[str] = Field(default_factory=list, description="Event slugs to join as ACCOMPANIST")


class ApplicationReject(BaseModel):
    rejection_reason: str = Field(..., min_length=1, max_length=2000)


class ApplicationResponse(BaseModel):
    id: int
    student_id: int
    status: str
    department: Optional[str] = None
    year_of_study: Optional[int] = None
    semester: Optional[int] = None
    rejected_reason: Optional[str] = None
    submitted_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None

    class Config:
        from_attributes = True
