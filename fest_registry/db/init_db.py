"""
Create all tables (colleges, users, students, applications, accompanists, the event
assignment tables, the QR pool and final participants) if they do not exist.

Run once against an empty database:
  DATABASE_URL=postgresql+asyncpg://... python -m fest_registry.db.init_db
"""
import asyncio

from sqlalchemy.ext.asyncio import AsyncEngine

import fest_registry.core.models  # noqa: F401  (registers every table on Base.metadata)
from fest_registry.db.session import Base, engine


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main() -> None:
    await create_tables(engine)
    print("Tables:", ", ".join(sorted(Base.metadata.tables)))
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
