"""
Manager review of student applications. Approval counts against the college quota;
rejection also takes the student off every event. Both are refused after final approval.
"""

from datetime import datetime

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.api.v1.event_assignments import service as event_service
from fest_registry.api.v1.final_approval import roster_lock
from fest_registry.api.v1.quota import quota_used
from fest_registry.core import audit_service
from fest_registry.core.enums import ApplicationStatus, AssignmentPersonType, EventRole
from fest_registry.core.exceptions import RosterLocked, ServiceError
from fest_registry.core.models import Student, StudentApplication

from .schemas import ApplicationApprove, ApplicationReject, ApplicationResponse


async def _get_application_for_college(
    db: AsyncSession,
    college_id: int,
    application_id: int,
) -> StudentApplication:
    application = (await db.execute(
        select(StudentApplication)
        .join(Student, Student.id == StudentApplication.student_id)
        .where(StudentApplication.id == application_id, Student.college_id == college_id)
    )).scalar_one_or_none()
    if not application:
        raise ServiceError("Application not found", status.HTTP_404_NOT_FOUND)
    return application


async def approve_application(
    db: AsyncSession,
    college_id: int,
    application_id: int,
    payload: ApplicationApprove,
    reviewed_by: int,
    reviewed_by_role: str,
) -> ApplicationResponse:
    college = await roster_lock.get_college(db, college_id, for_update=True)
    if college is None:
        raise ServiceError("College not found", status.HTTP_404_NOT_FOUND)
    if college.is_final_approved:
        raise RosterLocked()

    application = await _get_application_for_college(db, college_id, application_id)
    if application.status != ApplicationStatus.SUBMITTED.value:
        raise ServiceError(
            f"Only submitted applications can be approved (current status: {application.status})",
            status.HTTP_409_CONFLICT,
        )

    used = await quota_used(db, college_id)
    if used >= college.max_quota:
        raise ServiceError(
            f"College quota exceeded ({used}/{college.max_quota}). Remove existing participants before adding new ones.",
            status.HTTP_403_FORBIDDEN,
        )

    from_status = application.status
    application.status = ApplicationStatus.APPROVED.value
    application.reviewed_at = datetime.utcnow()
    application.reviewed_by = reviewed_by
    application.rejected_reason = None
    await db.flush()

    for slug in payload.participating_events:
        await event_service.assign(
            db, college_id, slug, AssignmentPersonType.student, application.student_id, EventRole.PARTICIPANT
        )
    for slug in payload.accompanying_events:
        await event_service.assign(
            db, college_id, slug, AssignmentPersonType.student, application.student_id, EventRole.ACCOMPANIST
        )

    await audit_service.log_audit(
        db,
        college_id,
        "student_application",
        application.id,
        "application_approved",
        from_status=from_status,
        to_status=application.status,
        performed_by=reviewed_by,
        performed_by_role=reviewed_by_role,
    )
    await db.commit()
    await db.refresh(application)
    return ApplicationResponse.model_validate(application)


async def reject_application(
    db: AsyncSession,
    college_id: int,
    application_id: int,
    payload: ApplicationReject,
    reviewed_by: int,
    reviewed_by_role: str,
) -> ApplicationResponse:
    await roster_lock.ensure_unlocked(db, college_id, for_update=True)

    application = await _get_application_for_college(db, college_id, application_id)
    if application.status == ApplicationStatus.REJECTED.value:
        raise ServiceError("Application is already rejected", status.HTTP_409_CONFLICT)

    from_status = application.status
    application.status = ApplicationStatus.REJECTED.value
    application.rejected_reason = payload.rejection_reason.strip()
    application.reviewed_at = datetime.utcnow()
    application.reviewed_by = reviewed_by

    student = (await db.execute(select(Student).where(Student.id == application.student_id))).scalar_one()
    student.reapply_count = (student.reapply_count or 0) + 1

    await event_service.remove_student_from_all_events(db, college_id, student.id)
    await audit_service.log_audit(
        db,
        college_id,
        "student_application",
        application.id,
        "application_rejected",
        from_status=from_status,
        to_status=application.status,
        performed_by=reviewed_by,
        performed_by_role=reviewed_by_role,
        remarks=application.rejected_reason,
    )
    await db.commit()
    await db.refresh(application)
    return ApplicationResponse.model_validate(application)
