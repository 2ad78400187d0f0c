import pytest
from sqlalchemy.dialects import postgresql

from fest_registry.api.v1.final_approval import qr_pool
from fest_registry.core.exceptions import UnexpectedFailure
from fest_registry.db.seed_qr_pool import generate_codes, seed_qr_pool


def test_reservation_skips_locked_rows_on_postgres() -> None:
    sql = str(qr_pool.reserve_statement(3).compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE SKIP LOCKED" in sql
    assert "ORDER BY qr_code_pool.id" in sql
    assert "qr_code_pool.is_used IS false" in sql


@pytest.mark.asyncio
async def test_reserve_takes_lowest_unused_ids(seed, db_session) -> None:
    codes = await seed.qr_codes(4)

    reserved = await qr_pool.reserve(db_session, 2)

    assert [r.qr_code for r in reserved] == codes[:2]
    assert await qr_pool.reserve(db_session, 0) == []


@pytest.mark.asyncio
async def test_reserve_returns_short_when_pool_is_small(seed, db_session) -> None:
    await seed.qr_codes(2)
    assert len(await qr_pool.reserve(db_session, 5)) == 2


@pytest.mark.asyncio
async def test_mark_used_refuses_entries_already_used(seed, session_factory) -> None:
    await seed.qr_codes(2)
    async with session_factory() as db:
        first, second = await qr_pool.reserve(db, 2)
        # Participant ids are not checked against the table on SQLite
        await qr_pool.mark_used(db, {first.pool_entry_id: 101})
        await db.commit()

    async with session_factory() as db:
        with pytest.raises(UnexpectedFailure):
            await qr_pool.mark_used(db, {first.pool_entry_id: 102, second.pool_entry_id: 103})
        await db.rollback()
        assert await qr_pool.count_available(db) == 1

    pool = await seed.pool()
    assert [(e.is_used, e.assigned_to_person_id) for e in pool] == [(True, 101), (False, None)]


@pytest.mark.asyncio
async def test_seed_qr_pool_skips_existing_codes(seed, db_session) -> None:
    existing = await seed.qr_codes(1)

    inserted = await seed_qr_pool(db_session, existing + ["NEW-1", "NEW-2"])
    await db_session.commit()

    assert inserted == 2
    assert await qr_pool.count_available(db_session) == 3


def test_generated_codes_are_unique_and_prefixed() -> None:
    codes = generate_codes(50, prefix="VF26")
    assert len(set(codes)) == 50
    assert all(c.startswith("VF26-") for c in codes)
