from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.api.v1.final_approval.roster_lock import require_unlocked_college
from fest_registry.auth.rbac import college_of, require_roles
from fest_registry.auth.schemas import CurrentUser
from fest_registry.core.enums import UserRole
from fest_registry.core.exceptions import ServiceError
from fest_registry.db.session import get_db

from .schemas import ApplicationApprove, ApplicationReject, ApplicationResponse
from . import service

router = APIRouter(prefix="/api/v1/manager/applications", tags=["applications"])


@router.post(
    "/{application_id}/approve",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_unlocked_college)],
)
async def approve_application(
    application_id: int,
    payload: ApplicationApprove,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.MANAGER, UserRole.PRINCIPAL)),
) -> ApplicationResponse:
    """Approve a submitted application, optionally assigning events. Refused after final approval."""
    try:
        return await service.approve_application(
            db,
            college_of(current_user),
            application_id,
            payload,
            reviewed_by=current_user.id,
            reviewed_by_role=current_user.role,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{application_id}/reject",
    response_model=ApplicationResponse,
    dependencies=[Depends(require_unlocked_college)],
)
async def reject_application(
    application_id: int,
    payload: ApplicationReject,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(UserRole.MANAGER, UserRole.PRINCIPAL)),
) -> ApplicationResponse:
    """Reject a submitted or approved application. Refused after final approval."""
    try:
        return await service.reject_application(
            db,
            college_of(current_user),
            application_id,
            payload,
            reviewed_by=current_user.id,
            reviewed_by_role=current_user.role,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
