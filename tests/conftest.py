import os
import tempfile
from typing import AsyncGenerator, Dict, Iterable, List, Optional, Tuple

_DB_PATH = os.path.join(tempfile.mkdtemp(prefix="fest-registry-tests-"), "test.db")
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{_DB_PATH}"

# Settings are read at import time
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
# SQLite runs final approval at its default isolation level
os.environ["FINAL_APPROVAL_ISOLATION_LEVEL"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event, insert, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from fest_registry.auth.models import User
from fest_registry.auth.security import token_for_user
from fest_registry.core.enums import ApplicationStatus, AssignmentPersonType, EventRole, UserRole
from fest_registry.core.models import (
    EVENT_TABLES,
    Accompanist,
    ApplicationDocument,
    College,
    FinalEventParticipant,
    QrCodePoolEntry,
    Student,
    StudentApplication,
)
from fest_registry.db.session import Base, get_db
from fest_registry.main import app


class Seed:
    """Writes fixture rows, each call in its own committed session."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self.session_factory = session_factory
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _add(self, obj):
        async with self.session_factory() as session:
            session.add(obj)
            await session.commit()
            return obj

    async def college(self, code: Optional[str] = None, max_quota: int = 45) -> College:
        n = self._next()
        return await self._add(
            College(college_code=code or f"C{n:03d}", college_name=f"College {n}", max_quota=max_quota)
        )

    async def user(self, role: UserRole, college_id: Optional[int] = None, is_active: bool = True) -> User:
        n = self._next()
        return await self._add(
            User(
                full_name=f"{role.value.title()} {n}",
                email=f"user{n}@example.com",
                role=role.value,
                college_id=college_id,
                is_active=is_active,
            )
        )

    async def student(
        self,
        college_id: int,
        status: ApplicationStatus = ApplicationStatus.APPROVED,
        events: Iterable[Tuple[str, EventRole]] = (("quiz", EventRole.PARTICIPANT),),
        documents: Optional[Dict[str, str]] = None,
    ) -> Student:
        """A student with one application in `status`, assigned to `events`."""
        n = self._next()
        async with self.session_factory() as session:
            student = Student(
                usn=f"USN{n:05d}",
                full_name=f"Student {n}",
                phone=f"90000{n:05d}",
                email=f"student{n}@example.com",
                gender="F",
                college_id=college_id,
            )
            session.add(student)
            await session.flush()
            application = StudentApplication(
                student_id=student.id,
                status=status.value,
                department="Physics",
                year_of_study=2,
                semester=3,
            )
            session.add(application)
            await session.flush()
            for doc_type, url in (documents or {}).items():
                session.add(ApplicationDocument(application_id=application.id, document_type=doc_type, document_url=url))
            for slug, role in events:
                await session.execute(
                    insert(EVENT_TABLES[slug]).values(
                        college_id=college_id,
                        person_type=AssignmentPersonType.student.value,
                        student_id=student.id,
                        event_type=role.value,
                        full_name=student.full_name,
                    )
                )
            await session.commit()
            return student

    async def application(self, student_id: int, status: ApplicationStatus) -> StudentApplication:
        return await self._add(StudentApplication(student_id=student_id, status=status.value))

    async def accompanist(
        self,
        college_id: int,
        student_id: Optional[int] = None,
        is_team_manager: bool = False,
        is_active: bool = True,
    ) -> Accompanist:
        n = self._next()
        return await self._add(
            Accompanist(
                college_id=college_id,
                full_name=f"Accompanist {n}",
                phone=f"80000{n:05d}",
                accompanist_type="faculty",
                student_id=student_id,
                is_team_manager=is_team_manager,
                is_active=is_active,
            )
        )

    async def qr_codes(self, count: int) -> List[str]:
        codes = [f"QR-{self._next():06d}" for _ in range(count)]
        async with self.session_factory() as session:
            session.add_all([QrCodePoolEntry(qr_code=c) for c in codes])
            await session.commit()
        return codes

    # ----- reads -----

    async def participants(self, college_id: Optional[int] = None) -> List[FinalEventParticipant]:
        q = select(FinalEventParticipant).order_by(FinalEventParticipant.id)
        if college_id is not None:
            q = q.where(FinalEventParticipant.college_id == college_id)
        async with self.session_factory() as session:
            return list((await session.execute(q)).scalars().all())

    async def pool(self) -> List[QrCodePoolEntry]:
        async with self.session_factory() as session:
            return list((await session.execute(select(QrCodePoolEntry).order_by(QrCodePoolEntry.id))).scalars().all())

    async def get_college(self, college_id: int) -> College:
        async with self.session_factory() as session:
            return (await session.execute(select(College).where(College.id == college_id))).scalar_one()

    async def application_ids(self, student_id: int) -> List[int]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(StudentApplication.id)
                .where(StudentApplication.student_id == student_id)
                .order_by(StudentApplication.id)
            )
            return list(result.scalars().all())


def _begin_immediate(engine) -> None:
    """
    SQLite has no row locks. BEGIN IMMEDIATE takes the database write lock when a
    transaction starts, so overlapping transactions run one after the other.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        # Stop the driver from issuing its own deferred BEGIN
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@pytest.fixture()
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema in the temporary SQLite file for every test."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)
    _begin_immediate(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def seed(session_factory: async_sessionmaker) -> Seed:
    return Seed(session_factory)


@pytest.fixture()
async def client(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app; one session per request, like get_db."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token_for_user(user.id, user.role)}"}
