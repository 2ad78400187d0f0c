"""
Roster lock: the per-college is_final_approved flag.

Final approval takes the college row FOR UPDATE, which serializes attempts for the
same college. Every roster write checks ensure_unlocked (or depends on
require_unlocked_college) and is refused once the flag is set.
"""

from datetime import datetime
from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.auth.dependencies import get_current_user
from fest_registry.auth.schemas import CurrentUser
from fest_registry.core.enums import UserRole
from fest_registry.core.exceptions import AlreadyApproved, CollegeNotFound, RosterLocked, ServiceError
from fest_registry.core.models import College
from fest_registry.db.session import get_db

# Platform admins act across colleges and may edit locked rosters
LOCK_EXEMPT_ROLES = (UserRole.ADMIN.value, UserRole.SUB_ADMIN.value)


async def lock_college_for_update(db: AsyncSession, college_id: int) -> College:
    """Exclusive row lock on the college; fails if missing or already approved."""
    result = await db.execute(
        select(College)
        .where(College.id == college_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    college = result.scalar_one_or_none()
    if college is None:
        raise CollegeNotFound()
    if college.is_final_approved:
        raise AlreadyApproved()
    return college


def set_locked(college: College, approver_id: int, approved_at: datetime) -> None:
    """Terminal write of the final-approval transaction. Caller flushes and commits."""
    college.is_final_approved = True
    college.final_approved_at = approved_at
    college.final_approved_by = approver_id


async def get_college(db: AsyncSession, college_id: int, for_update: bool = False) -> Optional[College]:
    q = select(College).where(College.id == college_id)
    if for_update:
        q = q.with_for_update().execution_options(populate_existing=True)
    return (await db.execute(q)).scalar_one_or_none()


async def is_locked(db: AsyncSession, college_id: int, for_update: bool = False) -> bool:
    college = await get_college(db, college_id, for_update=for_update)
    if college is None:
        raise ServiceError("College not found", status.HTTP_404_NOT_FOUND)
    return bool(college.is_final_approved)


async def ensure_unlocked(db: AsyncSession, college_id: int, for_update: bool = False) -> None:
    """
    Raise RosterLocked if the college is final-approved. Writers pass for_update=True so
    the check holds the college row until their commit and cannot interleave with a
    final approval of the same college.
    """
    if await is_locked(db, college_id, for_update=for_update):
        raise RosterLocked()


async def require_unlocked_college(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Dependency: block roster writes once the caller's college is final-approved."""
    if current_user.role in LOCK_EXEMPT_ROLES:
        return current_user
    if current_user.college_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="College ID not found in user profile",
        )
    try:
        await ensure_unlocked(db, current_user.college_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return current_user
