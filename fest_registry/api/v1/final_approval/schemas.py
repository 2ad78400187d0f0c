from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from fest_registry.core.enums import PersonType


# ----- Eligibility -----

class EligiblePerson(BaseModel):
    """One person carried into final approval, with every field copied onto the participant row."""

    person_type: PersonType
    student_id: Optional[int] = None
    accompanist_id: Optional[int] = None
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    usn: Optional[str] = None
    department: Optional[str] = None
    year_of_study: Optional[int] = None
    semester: Optional[int] = None
    accompanist_type: Optional[str] = None
    is_team_manager: bool = False
    passport_photo_url: Optional[str] = None
    id_proof_url: Optional[str] = None
    college_id_card_url: Optional[str] = None


class EligibilityResult(BaseModel):
    persons: List[EligiblePerson] = Field(default_factory=list)
    student_count: int = 0
    accompanist_count: int = 0
    duplicates_removed: int = 0

    @property
    def total(self) -> int:
        return len(self.persons)


# ----- QR pool -----

class ReservedCode(BaseModel):
    pool_entry_id: int
    qr_code: str


# ----- Final approval -----

class FinalApprovalResult(BaseModel):
    college_id: int
    inserted_students: int
    inserted_accompanists: int
    total_participants: int
    duplicates_removed: int
    final_approved_at: datetime
    request_id: str
    timings_ms: Dict[str, int] = Field(default_factory=dict)


class FinalApprovalData(BaseModel):
    inserted_students: int
    inserted_accompanists: int
    total_participants: int
    duplicates_removed: int
    final_approved_at: datetime


class FinalApprovalResponse(BaseModel):
    success: bool = True
    message: str = "Final approval successful. All registrations are now locked."
    data: FinalApprovalData
    request_id: str


class LockStatusResponse(BaseModel):
    success: bool = True
    college_id: int
    college_code: str
    college_name: str
    is_locked: bool
    final_approved_at: Optional[datetime] = None
    final_approved_by: Optional[int] = None


class PendingFinalApprovalResponse(BaseModel):
    """What final approval would insert right now, and whether the pool can cover it."""

    success: bool = True
    is_locked: bool
    participants: List[EligiblePerson]
    student_count: int
    accompanist_count: int
    duplicates_removed: int
    total_participants: int
    qr_codes_available: int
    can_approve: bool


class FinalParticipantResponse(BaseModel):
    id: int
    college_id: int
    person_type: str
    student_id: Optional[int] = None
    accompanist_id: Optional[int] = None
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    usn: Optional[str] = None
    accompanist_type: Optional[str] = None
    is_team_manager: bool = False
    passport_photo_url: Optional[str] = None
    qr_code: str
    qr_assigned_at: datetime

    class Config:
        from_attributes = True
