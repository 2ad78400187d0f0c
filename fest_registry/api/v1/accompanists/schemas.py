from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from fest_registry.core.enums import AccompanistType


class AccompanistCreate(BaseModel):
    """Document URLs point at blobs already uploaded by the client."""

    full_name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=20)
    email: Optional[EmailStr] = None
    accompanist_type: AccompanistType
    student_id: Optional[int] = Field(None, description="Set when the accompanist is also a registered student")
    passport_photo_url: Optional[str] = None
    id_proof_url: Optional[str] = None
    college_id_card_url: Optional[str] = None


class AccompanistResponse(BaseModel):
    id: int
    college_id: int
    full_name: str
    phone: str
    email: Optional[str] = None
    accompanist_type: str
    student_id: Optional[int] = None
    is_team_manager: bool
    is_active: bool
    passport_photo_url: Optional[str] = None
    id_proof_url: Optional[str] = None
    college_id_card_url: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
