from fest_registry.auth.models import User
from fest_registry.core.models.college import College
from fest_registry.core.models.student import ApplicationDocument, Student, StudentApplication
from fest_registry.core.models.accompanist import Accompanist
from fest_registry.core.models.event_assignment import EVENT_TABLES
from fest_registry.core.models.final_event_participant import FinalEventParticipant
from fest_registry.core.models.qr_code_pool import QrCodePoolEntry
from fest_registry.core.models.audit_log import AuditLog

__all__ = [
    "Accompanist",
    "ApplicationDocument",
    "AuditLog",
    "College",
    "EVENT_TABLES",
    "FinalEventParticipant",
    "QrCodePoolEntry",
    "Student",
    "StudentApplication",
    "User",
]
