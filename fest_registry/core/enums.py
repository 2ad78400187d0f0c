from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    SUB_ADMIN = "SUB_ADMIN"
    PRINCIPAL = "PRINCIPAL"
    MANAGER = "MANAGER"


class ApplicationStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AccompanistType(str, Enum):
    FACULTY = "faculty"
    PROFESSIONAL = "professional"


class PersonType(str, Enum):
    """Person type on final participant rows."""

    STUDENT = "STUDENT"
    ACCOMPANIST = "ACCOMPANIST"


class AssignmentPersonType(str, Enum):
    """Person type on event assignment rows."""

    student = "student"
    accompanist = "accompanist"


class EventRole(str, Enum):
    PARTICIPANT = "PARTICIPANT"
    ACCOMPANIST = "ACCOMPANIST"


class FinalApprovalState(str, Enum):
    START = "START"
    LOCK_CHECKED = "LOCK_CHECKED"
    ELIGIBILITY_RESOLVED = "ELIGIBILITY_RESOLVED"
    QR_RESERVED = "QR_RESERVED"
    PARTICIPANTS_WRITTEN = "PARTICIPANTS_WRITTEN"
    POOL_UPDATED = "POOL_UPDATED"
    LOCK_SET = "LOCK_SET"
    COMMITTED = "COMMITTED"
    ABORTED = "ABORTED"
