"""
Eligibility resolver: who becomes a final participant of a college.

1. Students whose latest application is APPROVED.
2. When event assignment is required (the default), only those of them who are on at
   least one event table of the college, as PARTICIPANT or ACCOMPANIST.
3. Active accompanists of the college.
4. An accompanist linked to a student already taken in step 2 is dropped, so a
   person who is both is counted once.

Students come first, then accompanists, each by ascending id.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import Table, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.core.config import settings
from fest_registry.core.enums import ApplicationStatus, AssignmentPersonType, EventRole, PersonType
from fest_registry.core.exceptions import NoEligibleParticipants
from fest_registry.core.models import (
    EVENT_TABLES,
    Accompanist,
    ApplicationDocument,
    Student,
    StudentApplication,
)

from .schemas import EligibilityResult, EligiblePerson

logger = logging.getLogger(__name__)

# Application document types copied onto participant rows
ID_PROOF_DOCUMENT_TYPES = ("AADHAR", "ID_PROOF", "GOVERNMENT_ID_PROOF")
COLLEGE_ID_CARD_DOCUMENT_TYPE = "COLLEGE_ID_CARD"


def _latest_applications():
    """student_id -> id of the student's most recent application."""
    return (
        select(
            StudentApplication.student_id.label("student_id"),
            func.max(StudentApplication.id).label("application_id"),
        )
        .group_by(StudentApplication.student_id)
        .subquery("latest_application")
    )


def _assigned_to_any_event(college_id: int, tables: Iterable[Table]):
    """Correlated EXISTS per event table, OR-ed together."""
    return or_(
        *[
            exists().where(
                t.c.college_id == college_id,
                t.c.person_type == AssignmentPersonType.student.value,
                t.c.student_id == Student.id,
                t.c.event_type.in_([EventRole.PARTICIPANT.value, EventRole.ACCOMPANIST.value]),
            )
            for t in tables
        ]
    )


def _first_document(documents: Dict[str, str], types: Iterable[str]) -> Optional[str]:
    for t in types:
        if documents.get(t):
            return documents[t]
    return None


async def _documents_by_application(db: AsyncSession, application_ids: List[int]) -> Dict[int, Dict[str, str]]:
    if not application_ids:
        return {}
    result = await db.execute(
        select(ApplicationDocument)
        .where(ApplicationDocument.application_id.in_(application_ids))
        .order_by(ApplicationDocument.id)
    )
    out: Dict[int, Dict[str, str]] = {}
    for doc in result.scalars().all():
        # Later uploads of the same type win
        out.setdefault(doc.application_id, {})[doc.document_type.upper()] = doc.document_url
    return out


async def approved_students(
    db: AsyncSession,
    college_id: int,
    require_event_assignment: bool,
    event_tables: Optional[Iterable[Table]] = None,
) -> List[EligiblePerson]:
    latest = _latest_applications()
    q = (
        select(Student, StudentApplication)
        .join(latest, latest.c.student_id == Student.id)
        .join(StudentApplication, StudentApplication.id == latest.c.application_id)
        .where(
            Student.college_id == college_id,
            StudentApplication.status == ApplicationStatus.APPROVED.value,
        )
        .order_by(Student.id)
    )
    if require_event_assignment:
        tables = list(event_tables if event_tables is not None else EVENT_TABLES.values())
        if not tables:
            return []
        q = q.where(_assigned_to_any_event(college_id, tables))

    rows = (await db.execute(q)).all()
    documents = await _documents_by_application(db, [application.id for _, application in rows])

    persons: List[EligiblePerson] = []
    for student, application in rows:
        docs = documents.get(application.id, {})
        persons.append(
            EligiblePerson(
                person_type=PersonType.STUDENT,
                student_id=student.id,
                full_name=student.full_name,
                phone=student.phone,
                email=student.email,
                gender=student.gender,
                usn=student.usn,
                department=application.department,
                year_of_study=application.year_of_study,
                semester=application.semester,
                passport_photo_url=student.passport_photo_url,
                id_proof_url=_first_document(docs, ID_PROOF_DOCUMENT_TYPES),
                college_id_card_url=docs.get(COLLEGE_ID_CARD_DOCUMENT_TYPE),
            )
        )
    return persons


async def active_accompanists(db: AsyncSession, college_id: int) -> List[Accompanist]:
    result = await db.execute(
        select(Accompanist)
        .where(Accompanist.college_id == college_id, Accompanist.is_active.is_(True))
        .order_by(Accompanist.id)
    )
    return list(result.scalars().all())


def _accompanist_person(a: Accompanist) -> EligiblePerson:
    return EligiblePerson(
        person_type=PersonType.ACCOMPANIST,
        accompanist_id=a.id,
        full_name=a.full_name,
        phone=a.phone,
        email=a.email,
        accompanist_type=a.accompanist_type,
        is_team_manager=bool(a.is_team_manager),
        passport_photo_url=a.passport_photo_url,
        id_proof_url=a.id_proof_url,
        college_id_card_url=a.college_id_card_url,
    )


async def resolve(
    db: AsyncSession,
    college_id: int,
    require_event_assignment: Optional[bool] = None,
    event_tables: Optional[Iterable[Table]] = None,
) -> EligibilityResult:
    """Eligible students and accompanists of a college. Read only; may return an empty result."""
    if require_event_assignment is None:
        require_event_assignment = settings.final_approval_require_event_assignment

    students = await approved_students(db, college_id, require_event_assignment, event_tables)
    student_ids = {p.student_id for p in students}

    accompanists: List[EligiblePerson] = []
    duplicates_removed = 0
    for a in await active_accompanists(db, college_id):
        if a.student_id is not None and a.student_id in student_ids:
            duplicates_removed += 1
            continue
        accompanists.append(_accompanist_person(a))

    if duplicates_removed:
        logger.info(
            "Dropped accompanists already counted as students",
            extra={"college_id": college_id, "duplicates_removed": duplicates_removed},
        )

    return EligibilityResult(
        persons=students + accompanists,
        student_count=len(students),
        accompanist_count=len(accompanists),
        duplicates_removed=duplicates_removed,
    )


async def require_eligible(db: AsyncSession, college_id: int, **kwargs) -> EligibilityResult:
    result = await resolve(db, college_id, **kwargs)
    if not result.persons:
        raise NoEligibleParticipants()
    return result
