"""
Event assignments: put approved students and accompanists of a college on event
categories. Students may participate or accompany; accompanists may only accompany.
All writes are refused once the college is final-approved.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import status
from sqlalchemy import Table, delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.api.v1.final_approval import roster_lock
from fest_registry.api.v1.quota import latest_application
from fest_registry.core import audit_service
from fest_registry.core.enums import ApplicationStatus, AssignmentPersonType, EventRole
from fest_registry.core.event_categories import EVENT_CATEGORIES
from fest_registry.core.exceptions import ServiceError
from fest_registry.core.models import EVENT_TABLES, Accompanist, Student

from .schemas import (
    EventAssignmentCreate,
    EventAssignmentResponse,
    EventAssignmentsResponse,
    EventCategoryResponse,
)


def list_event_categories() -> List[EventCategoryResponse]:
    return [EventCategoryResponse(slug=slug, table_name=name) for slug, name in EVENT_CATEGORIES.items()]


def event_table(event_slug: str) -> Table:
    table = EVENT_TABLES.get(event_slug)
    if table is None:
        raise ServiceError("Invalid or missing event_slug", status.HTTP_400_BAD_REQUEST)
    return table


def _person_column(table: Table, person_type: AssignmentPersonType):
    return table.c.student_id if person_type == AssignmentPersonType.student else table.c.accompanist_id


def _row_to_response(event_slug: str, row) -> EventAssignmentResponse:
    person_id = row.student_id if row.person_type == AssignmentPersonType.student.value else row.accompanist_id
    return EventAssignmentResponse(
        id=row.id,
        event_slug=event_slug,
        person_type=row.person_type,
        person_id=person_id,
        event_type=row.event_type,
        full_name=row.full_name,
        phone=row.phone,
        email=row.email,
        created_at=row.created_at,
    )


async def list_assignments(db: AsyncSession, college_id: int, event_slug: str) -> EventAssignmentsResponse:
    table = event_table(event_slug)
    rows = (await db.execute(
        select(table).where(table.c.college_id == college_id).order_by(table.c.full_name, table.c.id)
    )).all()
    items = [_row_to_response(event_slug, r) for r in rows]
    return EventAssignmentsResponse(
        event_slug=event_slug,
        participants=[i for i in items if i.event_type == EventRole.PARTICIPANT.value],
        accompanists=[i for i in items if i.event_type == EventRole.ACCOMPANIST.value],
    )


async def _resolve_person(
    db: AsyncSession,
    college_id: int,
    person_type: AssignmentPersonType,
    person_id: int,
) -> Tuple[str, Optional[str], Optional[str]]:
    """(full_name, phone, email) of a person that may be assigned to events of the college."""
    if person_type == AssignmentPersonType.student:
        student = (await db.execute(
            select(Student).where(Student.id == person_id, Student.college_id == college_id)
        )).scalar_one_or_none()
        if not student:
            raise ServiceError("Student not found or does not belong to your college", status.HTTP_404_NOT_FOUND)
        application = await latest_application(db, student.id)
        if not application or application.status != ApplicationStatus.APPROVED.value:
            raise ServiceError("Only approved students can be assigned to events", status.HTTP_403_FORBIDDEN)
        return student.full_name, student.phone, student.email

    accompanist = (await db.execute(
        select(Accompanist).where(Accompanist.id == person_id, Accompanist.college_id == college_id)
    )).scalar_one_or_none()
    if not accompanist:
        raise ServiceError("Accompanist not found or does not belong to your college", status.HTTP_404_NOT_FOUND)
    return accompanist.full_name, accompanist.phone, accompanist.email


async def assign(
    db: AsyncSession,
    college_id: int,
    event_slug: str,
    person_type: AssignmentPersonType,
    person_id: int,
    event_type: EventRole,
) -> int:
    """Insert one assignment row. Caller holds the roster lock check and commits."""
    table = event_table(event_slug)
    if person_type == AssignmentPersonType.accompanist and event_type == EventRole.PARTICIPANT:
        raise ServiceError("Accompanists cannot be participants", status.HTTP_400_BAD_REQUEST)

    full_name, phone, email = await _resolve_person(db, college_id, person_type, person_id)

    existing = (await db.execute(
        select(table.c.id).where(
            table.c.college_id == college_id,
            table.c.person_type == person_type.value,
            _person_column(table, person_type) == person_id,
        )
    )).first()
    if existing:
        raise ServiceError("Person already assigned to this event", status.HTTP_409_CONFLICT)

    values = {
        "college_id": college_id,
        "person_type": person_type.value,
        "event_type": event_type.value,
        "full_name": full_name,
        "phone": phone,
        "email": email,
        "created_at": datetime.utcnow(),
    }
    if person_type == AssignmentPersonType.student:
        values["student_id"] = person_id
    else:
        values["accompanist_id"] = person_id
    result = await db.execute(insert(table).values(**values))
    return result.inserted_primary_key[0]


async def add_assignment(
    db: AsyncSession,
    college_id: int,
    event_slug: str,
    payload: EventAssignmentCreate,
    performed_by: int,
    performed_by_role: str,
) -> EventAssignmentResponse:
    await roster_lock.ensure_unlocked(db, college_id, for_update=True)
    assignment_id = await assign(
        db, college_id, event_slug, payload.person_type, payload.person_id, payload.event_type
    )
    await audit_service.log_audit(
        db,
        college_id,
        f"event:{event_slug}",
        assignment_id,
        "event_assignment_added",
        to_status=payload.event_type.value,
        performed_by=performed_by,
        performed_by_role=performed_by_role,
    )
    await db.commit()
    table = event_table(event_slug)
    row = (await db.execute(select(table).where(table.c.id == assignment_id))).one()
    return _row_to_response(event_slug, row)


async def remove_student_from_all_events(db: AsyncSession, college_id: int, student_id: int) -> int:
    """Drop every assignment of a student (used when the student is rejected). Caller commits."""
    removed = 0
    for table in EVENT_TABLES.values():
        result = await db.execute(
            delete(table).where(
                table.c.college_id == college_id,
                table.c.person_type == AssignmentPersonType.student.value,
                table.c.student_id == student_id,
            )
        )
        removed += result.rowcount or 0
    return removed


async def remove_assignment(
    db: AsyncSession,
    college_id: int,
    event_slug: str,
    person_type: AssignmentPersonType,
    person_id: int,
    performed_by: int,
    performed_by_role: str,
) -> None:
    table = event_table(event_slug)
    await roster_lock.ensure_unlocked(db, college_id, for_update=True)
    result = await db.execute(
        delete(table).where(
            table.c.college_id == college_id,
            table.c.person_type == person_type.value,
            _person_column(table, person_type) == person_id,
        )
    )
    if not result.rowcount:
        await db.rollback()
        raise ServiceError("Assignment not found", status.HTTP_404_NOT_FOUND)
    await audit_service.log_audit(
        db,
        college_id,
        f"event:{event_slug}",
        person_id,
        "event_assignment_removed",
        from_status=person_type.value,
        performed_by=performed_by,
        performed_by_role=performed_by_role,
    )
    await db.commit()
