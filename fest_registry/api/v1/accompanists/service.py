from typing import List

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.api.v1.final_approval import roster_lock
from fest_registry.api.v1.quota import quota_used
from fest_registry.core import audit_service
from fest_registry.core.exceptions import RosterLocked, ServiceError
from fest_registry.core.models import Accompanist, Student

from .schemas import AccompanistCreate, AccompanistResponse


async def list_accompanists(db: AsyncSession, college_id: int) -> List[AccompanistResponse]:
    result = await db.execute(
        select(Accompanist).where(Accompanist.college_id == college_id).order_by(Accompanist.created_at.desc())
    )
    return [AccompanistResponse.model_validate(a) for a in result.scalars().all()]


async def add_accompanist(
    db: AsyncSession,
    college_id: int,
    payload: AccompanistCreate,
    created_by: int,
    created_by_role: str,
) -> AccompanistResponse:
    """Add a (non team manager) accompanist. Counts against the college quota."""
    college = await roster_lock.get_college(db, college_id, for_update=True)
    if college is None:
        raise ServiceError("College not found", status.HTTP_404_NOT_FOUND)
    if college.is_final_approved:
        raise RosterLocked()

    used = await quota_used(db, college_id)
    if used >= college.max_quota:
        raise ServiceError(
            f"College quota exceeded ({used}/{college.max_quota}). Remove existing participants before adding new ones.",
            status.HTTP_403_FORBIDDEN,
        )

    if payload.student_id is not None:
        student = (await db.execute(
            select(Student).where(Student.id == payload.student_id, Student.college_id == college_id)
        )).scalar_one_or_none()
        if not student:
            raise ServiceError("Linked student not found in your college", status.HTTP_400_BAD_REQUEST)

    accompanist = Accompanist(
        college_id=college_id,
        full_name=payload.full_name.strip(),
        phone=payload.phone.strip(),
        email=payload.email,
        accompanist_type=payload.accompanist_type.value,
        student_id=payload.student_id,
        is_team_manager=False,
        passport_photo_url=payload.passport_photo_url,
        id_proof_url=payload.id_proof_url,
        college_id_card_url=payload.college_id_card_url,
        created_by_user_id=created_by,
    )
    db.add(accompanist)
    await db.flush()
    await audit_service.log_audit(
        db,
        college_id,
        "accompanist",
        accompanist.id,
        "accompanist_added",
        performed_by=created_by,
        performed_by_role=created_by_role,
    )
    await db.commit()
    await db.refresh(accompanist)
    return AccompanistResponse.model_validate(accompanist)


async def delete_accompanist(
    db: AsyncSession,
    college_id: int,
    accompanist_id: int,
    performed_by: int,
    performed_by_role: str,
) -> None:
    """Hard delete. The team manager profile cannot be deleted here."""
    await roster_lock.ensure_unlocked(db, college_id, for_update=True)
    accompanist = (await db.execute(
        select(Accompanist).where(Accompanist.id == accompanist_id, Accompanist.college_id == college_id)
    )).scalar_one_or_none()
    if not accompanist:
        raise ServiceError("Accompanist not found", status.HTTP_404_NOT_FOUND)
    if accompanist.is_team_manager:
        raise ServiceError("Cannot delete team manager profile", status.HTTP_403_FORBIDDEN)

    await db.delete(accompanist)
    await audit_service.log_audit(
        db,
        college_id,
        "accompanist",
        accompanist_id,
        "accompanist_deleted",
        performed_by=performed_by,
        performed_by_role=performed_by_role,
        remarks=accompanist.full_name,
    )
    await db.commit()
