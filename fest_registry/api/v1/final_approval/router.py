from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.auth.dependencies import get_current_user
from fest_registry.auth.rbac import college_of, require_roles
from fest_registry.auth.schemas import CurrentUser
from fest_registry.core.enums import PersonType, UserRole
from fest_registry.core.exceptions import FinalApprovalError, ServiceError, Unauthorized
from fest_registry.db.session import get_db

from .schemas import (
    FinalApprovalData,
    FinalApprovalResponse,
    FinalParticipantResponse,
    LockStatusResponse,
    PendingFinalApprovalResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/principal", tags=["final-approval"])


async def require_approving_principal(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Only a principal with a college may run final approval; refusals carry the Unauthorized kind."""
    if current_user.role != UserRole.PRINCIPAL.value or current_user.college_id is None:
        raise HTTPException(status_code=Unauthorized.default_status, detail=Unauthorized().to_detail())
    return current_user


@router.post("/final-approval", response_model=FinalApprovalResponse)
async def final_approval(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_approving_principal),
) -> FinalApprovalResponse:
    """
    Lock the principal's college and assign a QR code to every eligible participant.
    Errors carry a machine-readable `kind`; only `retryable: true` errors may be retried as-is.
    """
    try:
        result = await service.approve_with_retry(db, current_user.college_id, current_user.id)
    except FinalApprovalError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    return FinalApprovalResponse(
        data=FinalApprovalData(
            inserted_students=result.inserted_students,
            inserted_accompanists=result.inserted_accompanists,
            total_participants=result.total_participants,
            duplicates_removed=result.duplicates_removed,
            final_approved_at=result.final_approved_at,
        ),
        request_id=result.request_id,
    )


@router.get("/lock-status", response_model=LockStatusResponse)
async def lock_status(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.PRINCIPAL, UserRole.MANAGER)),
) -> LockStatusResponse:
    """Whether the caller's college is final-approved."""
    try:
        return await service.get_lock_status(db, college_of(current_user))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/pending-final-approval", response_model=PendingFinalApprovalResponse)
async def pending_final_approval(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.PRINCIPAL)),
) -> PendingFinalApprovalResponse:
    """Participants final approval would insert now, and QR pool availability."""
    try:
        return await service.preview_final_approval(db, college_of(current_user))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/final-participants", response_model=List[FinalParticipantResponse])
async def final_participants(
    person_type: Optional[PersonType] = Query(None, description="STUDENT or ACCOMPANIST"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.PRINCIPAL, UserRole.MANAGER)),
) -> List[FinalParticipantResponse]:
    """Final roster of the caller's college (empty until final approval)."""
    return await service.list_final_participants(db, college_of(current_user), person_type)
