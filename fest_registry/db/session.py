from typing import AsyncGenerator, Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from fest_registry.core.config import settings

# pool_pre_ping: drop connections the server closed while idle.
# pool_recycle: seconds before a pooled connection is replaced.
engine = create_async_engine(
    settings.database_url,
    echo=False,
    future=True,
    pool_pre_ping=True,
    pool_recycle=300,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()

# PostgreSQL: serialization_failure, deadlock_detected
SERIALIZATION_FAILURE_SQLSTATES = frozenset({"40001", "40P01"})


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; closed (and rolled back if still open) on exit."""
    async with AsyncSessionLocal() as session:
        yield session


def sqlstate_of(exc: BaseException) -> Optional[str]:
    """SQLSTATE of a wrapped driver error (asyncpg exposes sqlstate, psycopg pgcode)."""
    if not isinstance(exc, DBAPIError):
        return None
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_serialization_failure(exc: BaseException) -> bool:
    return sqlstate_of(exc) in SERIALIZATION_FAILURE_SQLSTATES
