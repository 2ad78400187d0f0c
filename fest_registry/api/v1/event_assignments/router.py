from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.api.v1.final_approval.roster_lock import require_unlocked_college
from fest_registry.auth.rbac import college_of, require_roles
from fest_registry.auth.schemas import CurrentUser
from fest_registry.core.enums import AssignmentPersonType, UserRole
from fest_registry.core.exceptions import ServiceError
from fest_registry.db.session import get_db

from .schemas import (
    EventAssignmentCreate,
    EventAssignmentResponse,
    EventAssignmentsResponse,
    EventCategoryResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/manager/events", tags=["event-assignments"])

_roster_roles = require_roles(UserRole.MANAGER, UserRole.PRINCIPAL)


@router.get("", response_model=List[EventCategoryResponse], dependencies=[Depends(_roster_roles)])
async def list_event_categories() -> List[EventCategoryResponse]:
    """All event categories of the fest."""
    return service.list_event_categories()


@router.get("/{event_slug}/assignments", response_model=EventAssignmentsResponse)
async def list_event_assignments(
    event_slug: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(_roster_roles),
) -> EventAssignmentsResponse:
    """Participants and accompanists of the caller's college on one event."""
    try:
        return await service.list_assignments(db, college_of(current_user), event_slug)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{event_slug}/assignments",
    response_model=EventAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_unlocked_college)],
)
async def add_event_assignment(
    event_slug: str,
    payload: EventAssignmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(_roster_roles),
) -> EventAssignmentResponse:
    """Assign a student or accompanist to an event. Refused after final approval."""
    try:
        return await service.add_assignment(
            db,
            college_of(current_user),
            event_slug,
            payload,
            performed_by=current_user.id,
            performed_by_role=current_user.role,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{event_slug}/assignments/{person_type}/{person_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_unlocked_college)],
)
async def remove_event_assignment(
    event_slug: str,
    person_type: AssignmentPersonType,
    person_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(_roster_roles),
) -> None:
    """Remove a person from an event. Refused after final approval."""
    try:
        await service.remove_assignment(
            db,
            college_of(current_user),
            event_slug,
            person_type,
            person_id,
            performed_by=current_user.id,
            performed_by_role=current_user.role,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
