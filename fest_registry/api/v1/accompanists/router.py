from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.api.v1.final_approval.roster_lock import require_unlocked_college
from fest_registry.auth.rbac import college_of, require_roles
from fest_registry.auth.schemas import CurrentUser
from fest_registry.core.enums import UserRole
from fest_registry.core.exceptions import ServiceError
from fest_registry.db.session import get_db

from .schemas import AccompanistCreate, AccompanistResponse
from . import service

router = APIRouter(prefix="/api/v1/manager/accompanists", tags=["accompanists"])

_roster_roles = require_roles(UserRole.MANAGER, UserRole.PRINCIPAL)


@router.get("", response_model=List[AccompanistResponse])
async def list_accompanists(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(_roster_roles),
) -> List[AccompanistResponse]:
    """Accompanists of the caller's college, newest first."""
    return await service.list_accompanists(db, college_of(current_user))


@router.post(
    "",
    response_model=AccompanistResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_unlocked_college)],
)
async def add_accompanist(
    payload: AccompanistCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(_roster_roles),
) -> AccompanistResponse:
    """Add an accompanist. Refused after final approval or when the quota is full."""
    try:
        return await service.add_accompanist(
            db,
            college_of(current_user),
            payload,
            created_by=current_user.id,
            created_by_role=current_user.role,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{accompanist_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_unlocked_college)],
)
async def delete_accompanist(
    accompanist_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(_roster_roles),
) -> None:
    """Delete an accompanist (not the team manager). Refused after final approval."""
    try:
        await service.delete_accompanist(
            db,
            college_of(current_user),
            accompanist_id,
            performed_by=current_user.id,
            performed_by_role=current_user.role,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
