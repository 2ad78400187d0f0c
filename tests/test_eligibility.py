"""Who is carried into final approval."""

import pytest

from fest_registry.api.v1.final_approval import eligibility
from fest_registry.core.enums import ApplicationStatus, EventRole, PersonType
from fest_registry.core.exceptions import NoEligibleParticipants


@pytest.mark.asyncio
async def test_only_approved_and_assigned_students(seed, db_session) -> None:
    college = await seed.college()
    participant = await seed.student(college.id, events=(("mime", EventRole.PARTICIPANT),))
    accompanying = await seed.student(college.id, events=(("skits", EventRole.ACCOMPANIST),))
    await seed.student(college.id, events=())
    await seed.student(college.id, status=ApplicationStatus.SUBMITTED)
    await seed.student(college.id, status=ApplicationStatus.REJECTED)

    result = await eligibility.resolve(db_session, college.id, require_event_assignment=True)

    assert [p.student_id for p in result.persons] == [participant.id, accompanying.id]
    assert result.student_count == 2
    assert result.accompanist_count == 0


@pytest.mark.asyncio
async def test_assignment_not_required(seed, db_session) -> None:
    college = await seed.college()
    assigned = await seed.student(college.id)
    unassigned = await seed.student(college.id, events=())

    result = await eligibility.resolve(db_session, college.id, require_event_assignment=False)

    assert [p.student_id for p in result.persons] == [assigned.id, unassigned.id]


@pytest.mark.asyncio
async def test_latest_application_decides(seed, db_session) -> None:
    college = await seed.college()
    reapproved = await seed.student(college.id, status=ApplicationStatus.REJECTED)
    await seed.application(reapproved.id, ApplicationStatus.APPROVED)
    later_rejected = await seed.student(college.id, status=ApplicationStatus.APPROVED)
    await seed.application(later_rejected.id, ApplicationStatus.REJECTED)

    result = await eligibility.resolve(db_session, college.id)

    assert [p.student_id for p in result.persons] == [reapproved.id]


@pytest.mark.asyncio
async def test_assignment_in_another_college_does_not_count(seed, db_session) -> None:
    college = await seed.college()
    other = await seed.college()
    await seed.student(college.id)
    # Same slug, other college
    await seed.student(other.id)

    result = await eligibility.resolve(db_session, college.id)

    assert result.student_count == 1
    assert all(p.person_type == PersonType.STUDENT for p in result.persons)


@pytest.mark.asyncio
async def test_students_first_then_accompanists_by_id(seed, db_session) -> None:
    college = await seed.college()
    a1 = await seed.accompanist(college.id)
    s1 = await seed.student(college.id)
    a2 = await seed.accompanist(college.id, is_team_manager=True)
    s2 = await seed.student(college.id)
    await seed.accompanist(college.id, is_active=False)

    result = await eligibility.resolve(db_session, college.id)

    assert [(p.person_type, p.student_id or p.accompanist_id) for p in result.persons] == [
        (PersonType.STUDENT, s1.id),
        (PersonType.STUDENT, s2.id),
        (PersonType.ACCOMPANIST, a1.id),
        (PersonType.ACCOMPANIST, a2.id),
    ]
    assert result.persons[-1].is_team_manager is True


@pytest.mark.asyncio
async def test_linked_accompanist_of_ineligible_student_is_kept(seed, db_session) -> None:
    college = await seed.college()
    eligible = await seed.student(college.id)
    unassigned = await seed.student(college.id, events=())
    await seed.accompanist(college.id, student_id=eligible.id)
    kept = await seed.accompanist(college.id, student_id=unassigned.id)

    result = await eligibility.resolve(db_session, college.id)

    assert result.duplicates_removed == 1
    assert [p.accompanist_id for p in result.persons if p.person_type == PersonType.ACCOMPANIST] == [kept.id]
    assert result.total == 2


@pytest.mark.asyncio
async def test_id_proof_falls_back_to_government_id(seed, db_session) -> None:
    college = await seed.college()
    await seed.student(college.id, documents={"GOVERNMENT_ID_PROOF": "https://blob/gov.pdf"})

    (person,) = (await eligibility.resolve(db_session, college.id)).persons

    assert person.id_proof_url == "https://blob/gov.pdf"
    assert person.college_id_card_url is None


@pytest.mark.asyncio
async def test_require_eligible_raises_on_empty_roster(seed, db_session) -> None:
    college = await seed.college()
    with pytest.raises(NoEligibleParticipants):
        await eligibility.require_eligible(db_session, college.id)
