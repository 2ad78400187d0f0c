"""
Final approval: lock a college's roster and give every eligible person a QR code.

One attempt is one database transaction:

    START -> LOCK_CHECKED -> ELIGIBILITY_RESOLVED -> QR_RESERVED
          -> PARTICIPANTS_WRITTEN -> POOL_UPDATED -> LOCK_SET -> COMMITTED

and any failure ends in ABORTED after a full rollback. Steps run strictly in this
order; participant ids produced by the inserts are what the pool update maps codes to.

Only ConcurrentConflict and ApprovalTimeout are safe to retry as-is. A second attempt
for an approved college is refused with AlreadyApproved, never re-run.
"""

import asyncio
import logging
import time
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.core import audit_service
from fest_registry.core.config import settings
from fest_registry.core.enums import FinalApprovalState, PersonType, UserRole
from fest_registry.core.exceptions import (
    ApprovalTimeout,
    ConcurrentConflict,
    FinalApprovalError,
    PoolExhausted,
    ServiceError,
    UnexpectedFailure,
)
from fest_registry.core.models import FinalEventParticipant
from fest_registry.db.session import is_serialization_failure

from . import eligibility, qr_pool, roster_lock
from .schemas import (
    EligiblePerson,
    FinalApprovalResult,
    FinalParticipantResponse,
    LockStatusResponse,
    PendingFinalApprovalResponse,
    ReservedCode,
)

logger = logging.getLogger(__name__)


def new_request_id() -> str:
    return f"REQ-{uuid.uuid4().hex[:12]}"


class _Attempt:
    """Request id, state and step timings of one final-approval attempt, for logs and errors."""

    def __init__(self, request_id: str, college_id: int, approver_id: int) -> None:
        self.request_id = request_id
        self.college_id = college_id
        self.approver_id = approver_id
        self.state = FinalApprovalState.START
        self.timings_ms: Dict[str, int] = {}
        self._started = time.perf_counter()
        self._step_started = self._started

    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self._started) * 1000)

    def _log_extra(self, **kwargs) -> Dict:
        extra = {
            "request_id": self.request_id,
            "college_id": self.college_id,
            "state": self.state.value,
            "elapsed_ms": self.elapsed_ms(),
        }
        extra.update(kwargs)
        return extra

    def advance(self, state: FinalApprovalState, **details) -> None:
        now = time.perf_counter()
        self.timings_ms[state.value.lower()] = int((now - self._step_started) * 1000)
        self._step_started = now
        self.state = state
        logger.info("Final approval %s", state.value, extra=self._log_extra(**details))

    def abort(self, error: FinalApprovalError) -> FinalApprovalError:
        error.request_id = self.request_id
        error.state = self.state.value
        failed_in = self.state
        self.state = FinalApprovalState.ABORTED
        log = logger.warning if error.status_code < 500 or error.retryable else logger.error
        log(
            "Final approval aborted: %s",
            error.kind,
            extra=self._log_extra(kind=error.kind, failed_in=failed_in.value, retryable=error.retryable),
        )
        return error


async def _begin(db: AsyncSession) -> None:
    """Start a fresh transaction at the configured isolation level."""
    # Auth ran a read on this session; the isolation level only applies to a new transaction
    if db.in_transaction():
        await db.rollback()
    level = settings.final_approval_isolation_level
    if level:
        await db.connection(execution_options={"isolation_level": level})


def _participant_row(
    college_id: int,
    person: EligiblePerson,
    code: ReservedCode,
    assigned_at: datetime,
    approver_id: int,
) -> FinalEventParticipant:
    return FinalEventParticipant(
        college_id=college_id,
        person_type=person.person_type.value,
        student_id=person.student_id,
        accompanist_id=person.accompanist_id,
        full_name=person.full_name,
        phone=person.phone,
        email=person.email,
        gender=person.gender,
        usn=person.usn,
        department=person.department,
        year_of_study=person.year_of_study,
        semester=person.semester,
        accompanist_type=person.accompanist_type,
        is_team_manager=person.is_team_manager,
        passport_photo_url=person.passport_photo_url,
        id_proof_url=person.id_proof_url,
        college_id_card_url=person.college_id_card_url,
        qr_code=code.qr_code,
        qr_assigned_at=assigned_at,
        approved_by=approver_id,
    )


async def _approve(db: AsyncSession, attempt: _Attempt) -> FinalApprovalResult:
    college_id = attempt.college_id
    approver_id = attempt.approver_id

    await _begin(db)
    college = await roster_lock.lock_college_for_update(db, college_id)
    attempt.advance(FinalApprovalState.LOCK_CHECKED)

    eligible = await eligibility.require_eligible(db, college_id)
    attempt.advance(
        FinalApprovalState.ELIGIBILITY_RESOLVED,
        students=eligible.student_count,
        accompanists=eligible.accompanist_count,
        duplicates_removed=eligible.duplicates_removed,
    )

    needed = eligible.total
    reserved = await qr_pool.reserve(db, needed)
    if len(reserved) < needed:
        raise PoolExhausted(needed=needed, available=len(reserved))
    attempt.advance(FinalApprovalState.QR_RESERVED, reserved=len(reserved))

    approved_at = datetime.utcnow()
    pairs: List[Tuple[ReservedCode, FinalEventParticipant]] = [
        (code, _participant_row(college_id, person, code, approved_at, approver_id))
        for person, code in zip(eligible.persons, reserved)
    ]
    db.add_all([row for _, row in pairs])
    await db.flush()
    attempt.advance(FinalApprovalState.PARTICIPANTS_WRITTEN, inserted=len(pairs))

    await qr_pool.mark_used(db, {code.pool_entry_id: row.id for code, row in pairs})
    attempt.advance(FinalApprovalState.POOL_UPDATED)

    roster_lock.set_locked(college, approver_id, approved_at)
    await audit_service.log_audit(
        db,
        college_id,
        "college",
        college_id,
        "college_final_approved",
        from_status="OPEN",
        to_status="FINAL_APPROVED",
        performed_by=approver_id,
        performed_by_role=UserRole.PRINCIPAL.value,
        remarks=f"{needed} participants, request {attempt.request_id}",
    )
    await db.flush()
    attempt.advance(FinalApprovalState.LOCK_SET)

    await db.commit()
    attempt.advance(FinalApprovalState.COMMITTED, total_ms=attempt.elapsed_ms())

    return FinalApprovalResult(
        college_id=college_id,
        inserted_students=eligible.student_count,
        inserted_accompanists=eligible.accompanist_count,
        total_participants=needed,
        duplicates_removed=eligible.duplicates_removed,
        final_approved_at=approved_at,
        request_id=attempt.request_id,
        timings_ms=dict(attempt.timings_ms),
    )


async def _guarded(db: AsyncSession, attempt: _Attempt) -> FinalApprovalResult:
    """_approve with every failure rolled back and mapped to a FinalApprovalError."""
    try:
        return await _approve(db, attempt)
    except FinalApprovalError as e:
        await db.rollback()
        raise attempt.abort(e)
    except DBAPIError as e:
        await db.rollback()
        if is_serialization_failure(e):
            raise attempt.abort(ConcurrentConflict()) from e
        logger.exception("Final approval database error", extra={"request_id": attempt.request_id})
        raise attempt.abort(UnexpectedFailure()) from e
    except Exception as e:
        await db.rollback()
        logger.exception("Final approval failed", extra={"request_id": attempt.request_id})
        raise attempt.abort(UnexpectedFailure()) from e


async def run_final_approval(
    db: AsyncSession,
    college_id: int,
    approver_id: int,
    *,
    timeout: Optional[float] = None,
    request_id: Optional[str] = None,
) -> FinalApprovalResult:
    """
    Run one final-approval attempt for a college. Either everything commits (participant
    rows, QR pool assignments, the college lock) or nothing does.

    Raises a FinalApprovalError subclass on failure, after rollback. ApprovalTimeout is
    the exception: a timeout that lands while the commit is in flight may follow a
    commit the server already applied, so a retry can answer AlreadyApproved.
    """
    attempt = _Attempt(request_id or new_request_id(), college_id, approver_id)
    if timeout is None:
        timeout = settings.final_approval_timeout_seconds
    try:
        return await asyncio.wait_for(_guarded(db, attempt), timeout=timeout)
    except asyncio.TimeoutError:
        # Cancelled attempt; the commit may or may not have reached the server
        await db.rollback()
        raise attempt.abort(ApprovalTimeout())


async def approve_with_retry(
    db: AsyncSession,
    college_id: int,
    approver_id: int,
    *,
    max_attempts: Optional[int] = None,
    backoff_seconds: float = 0.05,
) -> FinalApprovalResult:
    """Repeat run_final_approval while it fails with a retryable error, up to max_attempts."""
    if max_attempts is None:
        max_attempts = settings.final_approval_max_attempts
    max_attempts = max(1, max_attempts)
    request_id = new_request_id()
    for attempt_no in range(1, max_attempts + 1):
        try:
            return await run_final_approval(
                db, college_id, approver_id, request_id=f"{request_id}-{attempt_no}"
            )
        except FinalApprovalError as e:
            if not e.retryable or attempt_no == max_attempts:
                raise
            logger.info(
                "Retrying final approval after %s",
                e.kind,
                extra={"request_id": request_id, "college_id": college_id, "attempt": attempt_no},
            )
            await asyncio.sleep(backoff_seconds * attempt_no)
    raise UnexpectedFailure()


# ----- Reads -----

async def get_lock_status(db: AsyncSession, college_id: int) -> LockStatusResponse:
    college = await roster_lock.get_college(db, college_id)
    if college is None:
        raise ServiceError("College not found", status.HTTP_404_NOT_FOUND)
    return LockStatusResponse(
        college_id=college.id,
        college_code=college.college_code,
        college_name=college.college_name,
        is_locked=bool(college.is_final_approved),
        final_approved_at=college.final_approved_at,
        final_approved_by=college.final_approved_by,
    )


async def preview_final_approval(db: AsyncSession, college_id: int) -> PendingFinalApprovalResponse:
    """Who final approval would insert now and whether the pool covers them. Writes nothing."""
    locked = await roster_lock.is_locked(db, college_id)
    result = await eligibility.resolve(db, college_id)
    available = await qr_pool.count_available(db)
    return PendingFinalApprovalResponse(
        is_locked=locked,
        participants=result.persons,
        student_count=result.student_count,
        accompanist_count=result.accompanist_count,
        duplicates_removed=result.duplicates_removed,
        total_participants=result.total,
        qr_codes_available=available,
        can_approve=not locked and result.total > 0 and available >= result.total,
    )


async def list_final_participants(
    db: AsyncSession,
    college_id: int,
    person_type: Optional[PersonType] = None,
) -> List[FinalParticipantResponse]:
    q = select(FinalEventParticipant).where(FinalEventParticipant.college_id == college_id)
    if person_type is not None:
        q = q.where(FinalEventParticipant.person_type == person_type.value)
    q = q.order_by(FinalEventParticipant.id)
    rows = (await db.execute(q)).scalars().all()
    return [FinalParticipantResponse.model_validate(r) for r in rows]
