import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from decimal import Decimal
from typing import AsyncGenerator, Dict, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from feeledger.main import app
from feeledger.auth.models import Role, User
from feeledger.auth.security import create_access_token
from feeledger.core.models import Course
from feeledger.db.session import Base, get_db
from feeledger.api.v1.admissions import service as admission_service
from feeledger.api.v1.admissions.schemas import AdmissionCreate, AdmissionResponse


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; the FastAPI get_db dependency yields the same session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_course(db_session: AsyncSession):
    """Factory for a course fee schedule."""

    async def _make(
        name: str = "Web Development",
        admission_fee: Optional[str] = "2000",
        course_fee: Optional[str] = "8000",
        semester_fee: Optional[str] = None,
        agent_commission: Optional[str] = None,
    ) -> Course:
        course = Course(
            name=name,
            admission_fee=Decimal(admission_fee) if admission_fee is not None else None,
            course_fee=Decimal(course_fee) if course_fee is not None else None,
            semester_fee=Decimal(semester_fee) if semester_fee is not None else None,
            agent_commission=Decimal(agent_commission) if agent_commission is not None else None,
        )
        db_session.add(course)
        await db_session.commit()
        return course

    return _make


@pytest.fixture()
def make_admission(db_session: AsyncSession):
    """Factory for an admission opened against a course."""

    async def _make(course: Course, candidate_name: str = "Asha Menon", next_due_date=None) -> AdmissionResponse:
        return await admission_service.open_admission(
            db_session,
            AdmissionCreate(candidate_name=candidate_name, course_id=course.id, next_due_date=next_due_date),
        )

    return _make


@pytest.fixture()
async def accountant(db_session: AsyncSession) -> User:
    role = Role(
        name="ACCOUNTANT",
        permissions={
            "fees": {"create": True, "read": True, "update": True, "delete": True},
            "admissions": {"create": True, "read": True},
        },
    )
    user = User(full_name="Priya Accountant", email="priya@example.com", role="ACCOUNTANT")
    db_session.add_all([role, user])
    await db_session.commit()
    return user


@pytest.fixture()
def auth_headers(accountant: User) -> Dict[str, str]:
    token = create_access_token(subject={"sub": str(accountant.id)})
    return {"Authorization": f"Bearer {token}"}
