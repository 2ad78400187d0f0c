"""Roster writes at the service layer once a college is final-approved."""

import pytest

from fest_registry.api.v1.accompanists import service as accompanist_service
from fest_registry.api.v1.accompanists.schemas import AccompanistCreate
from fest_registry.api.v1.applications import service as application_service
from fest_registry.api.v1.applications.schemas import ApplicationApprove, ApplicationReject
from fest_registry.api.v1.final_approval import service
from fest_registry.core.enums import AccompanistType, ApplicationStatus, UserRole
from fest_registry.core.exceptions import RosterLocked


async def _locked_college(seed, session_factory):
    college = await seed.college()
    principal = await seed.user(UserRole.PRINCIPAL, college.id)
    manager = await seed.user(UserRole.MANAGER, college.id)
    await seed.student(college.id)
    await seed.qr_codes(1)
    async with session_factory() as db:
        await service.run_final_approval(db, college.id, principal.id)
    return college, manager


@pytest.mark.asyncio
async def test_application_review_refused_with_roster_locked(seed, session_factory) -> None:
    college, manager = await _locked_college(seed, session_factory)
    waiting = await seed.student(college.id, status=ApplicationStatus.SUBMITTED, events=())
    (application_id,) = await seed.application_ids(waiting.id)

    async with session_factory() as db:
        with pytest.raises(RosterLocked) as exc:
            await application_service.approve_application(
                db, college.id, application_id, ApplicationApprove(), manager.id, manager.role
            )
    assert exc.value.status_code == 403

    async with session_factory() as db:
        with pytest.raises(RosterLocked):
            await application_service.reject_application(
                db, college.id, application_id, ApplicationReject(rejection_reason="Late"), manager.id, manager.role
            )


@pytest.mark.asyncio
async def test_accompanist_add_refused_with_roster_locked(seed, session_factory) -> None:
    college, manager = await _locked_college(seed, session_factory)
    payload = AccompanistCreate(full_name="Late Coach", phone="9000000001", accompanist_type=AccompanistType.FACULTY)

    async with session_factory() as db:
        with pytest.raises(RosterLocked):
            await accompanist_service.add_accompanist(db, college.id, payload, manager.id, manager.role)
