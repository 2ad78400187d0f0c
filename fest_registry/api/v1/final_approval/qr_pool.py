"""
QR code pool allocation.

reserve() locks unused entries with FOR UPDATE SKIP LOCKED: two transactions
reserving at the same time get disjoint entries and never wait on each other's rows.
mark_used() assigns every reserved entry to its participant in one UPDATE, in the
same transaction as the participant inserts.
"""

from typing import Dict, List

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.core.exceptions import UnexpectedFailure
from fest_registry.core.models import QrCodePoolEntry

from .schemas import ReservedCode


def reserve_statement(n: int):
    return (
        select(QrCodePoolEntry.id, QrCodePoolEntry.qr_code)
        .where(QrCodePoolEntry.is_used.is_(False))
        .order_by(QrCodePoolEntry.id)
        .limit(n)
        .with_for_update(skip_locked=True)
    )


async def reserve(db: AsyncSession, n: int) -> List[ReservedCode]:
    """Lock up to n unused entries. Fewer than n means the pool cannot cover the request."""
    if n <= 0:
        return []
    rows = (await db.execute(reserve_statement(n))).all()
    return [ReservedCode(pool_entry_id=row.id, qr_code=row.qr_code) for row in rows]


async def mark_used(db: AsyncSession, assignments: Dict[int, int]) -> None:
    """
    assignments: pool entry id -> participant id.
    Every entry must still be unused; otherwise the transaction is aborted.
    """
    if not assignments:
        return
    entry_ids = list(assignments)
    result = await db.execute(
        update(QrCodePoolEntry)
        .where(QrCodePoolEntry.id.in_(entry_ids), QrCodePoolEntry.is_used.is_(False))
        .values(
            is_used=True,
            assigned_to_person_id=case(assignments, value=QrCodePoolEntry.id),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != len(entry_ids):
        raise UnexpectedFailure(
            f"QR pool update touched {result.rowcount} of {len(entry_ids)} reserved entries"
        )


async def count_available(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count()).select_from(QrCodePoolEntry).where(QrCodePoolEntry.is_used.is_(False))
    )
    return int(result.scalar_one())
