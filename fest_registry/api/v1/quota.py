"""
College quota: approved students + accompanists may not exceed colleges.max_quota.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.core.enums import ApplicationStatus
from fest_registry.core.models import Accompanist, Student, StudentApplication


async def latest_application(db: AsyncSession, student_id: int):
    return (await db.execute(
        select(StudentApplication)
        .where(StudentApplication.student_id == student_id)
        .order_by(StudentApplication.id.desc())
        .limit(1)
    )).scalar_one_or_none()


async def quota_used(db: AsyncSession, college_id: int) -> int:
    approved = await db.execute(
        select(func.count(func.distinct(StudentApplication.student_id)))
        .join(Student, Student.id == StudentApplication.student_id)
        .where(
            Student.college_id == college_id,
            StudentApplication.status == ApplicationStatus.APPROVED.value,
        )
    )
    accompanists = await db.execute(
        select(func.count()).select_from(Accompanist).where(Accompanist.college_id == college_id)
    )
    return int(approved.scalar_one()) + int(accompanists.scalar_one())
