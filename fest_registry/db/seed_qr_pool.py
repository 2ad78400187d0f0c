"""
Add unused codes to the QR code pool. Operators run this to replenish the pool when
final approval fails with PoolExhausted.

  python -m fest_registry.db.seed_qr_pool 500
  python -m fest_registry.db.seed_qr_pool 500 --prefix VF26

Codes are random; inserting is idempotent per code (existing codes are skipped).
"""
import argparse
import asyncio
import secrets
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fest_registry.api.v1.final_approval.qr_pool import count_available
from fest_registry.core.models import QrCodePoolEntry
from fest_registry.db.session import AsyncSessionLocal

DEFAULT_PREFIX = "FEST"


def generate_codes(count: int, prefix: str = DEFAULT_PREFIX) -> List[str]:
    codes = set()
    while len(codes) < count:
        codes.add(f"{prefix}-{secrets.token_hex(6).upper()}")
    return sorted(codes)


async def seed_qr_pool(db: AsyncSession, codes: List[str]) -> int:
    """Insert codes not already in the pool. Returns the number inserted. Caller commits."""
    if not codes:
        return 0
    existing = set((await db.execute(
        select(QrCodePoolEntry.qr_code).where(QrCodePoolEntry.qr_code.in_(codes))
    )).scalars().all())
    new_codes = [c for c in codes if c not in existing]
    db.add_all([QrCodePoolEntry(qr_code=c, is_used=False) for c in new_codes])
    await db.flush()
    return len(new_codes)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Add unused codes to the QR code pool")
    parser.add_argument("count", type=int)
    parser.add_argument("--prefix", default=DEFAULT_PREFIX)
    args = parser.parse_args()

    async with AsyncSessionLocal() as db:
        try:
            inserted = await seed_qr_pool(db, generate_codes(args.count, args.prefix))
            await db.commit()
            print(f"Inserted {inserted} QR codes; {await count_available(db)} unused in pool.")
        except Exception as e:
            await db.rollback()
            print("Error:", e)
            raise


if __name__ == "__main__":
    asyncio.run(main())
