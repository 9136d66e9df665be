"""Pytest configuration and fixtures."""

import json
import os

os.environ.setdefault("ENV", "test")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from collections.abc import AsyncGenerator
from datetime import date

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models.clinic import ClinicSettings
from app.models.episode import Episode
from app.models.lead import Lead
from app.models.messaging import ComparisonReportDelivery, NotificationHistory
from app.models.user import AppRole, PatientAccount, Profile, UserRole
from app.services.messaging import ResendEmailProvider, get_email_provider


# Use SQLite for testing (simpler than spinning up postgres)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def sent_emails() -> list[dict]:
    """Requests captured by the mock email provider."""
    return []


@pytest.fixture
def email_provider(sent_emails: list[dict]) -> ResendEmailProvider:
    """Email provider whose HTTP calls are answered in-process."""

    def handler(request: httpx.Request) -> httpx.Response:
        sent_emails.append(json.loads(request.content))
        return httpx.Response(200, json={"id": f"email_{len(sent_emails)}"})

    return ResendEmailProvider(
        api_key="re_test_key",
        api_url="https://email.test/emails",
        from_address="noreply@example.com",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture(scope="function")
async def client(
    async_session: AsyncSession,
    email_provider: ResendEmailProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """Create API client with overridden dependencies."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_provider] = lambda: email_provider

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
async def clinic_settings(async_session: AsyncSession) -> ClinicSettings:
    """Create the clinic settings row used by email templates."""
    clinic = ClinicSettings(
        clinic_name="Pittsford Performance Care",
        phone="585-555-0100",
        email="hello@pittsfordpc.example",
    )
    async_session.add(clinic)
    await async_session.commit()
    await async_session.refresh(clinic)
    return clinic


async def create_profile(
    session: AsyncSession,
    email: str,
    roles: list[AppRole],
) -> Profile:
    """Create a staff profile with role grants."""
    profile = Profile(email=email, full_name=email.split("@")[0].title())
    session.add(profile)
    await session.flush()

    for role in roles:
        session.add(UserRole(user_id=profile.id, role=role.value))

    await session.commit()
    await session.refresh(profile)
    return profile


@pytest.fixture
async def clinician(async_session: AsyncSession) -> Profile:
    """Create a clinician profile."""
    return await create_profile(async_session, "clinician@ppc.example", [AppRole.CLINICIAN])


@pytest.fixture
async def admin(async_session: AsyncSession) -> Profile:
    """Create an admin profile."""
    return await create_profile(async_session, "admin@ppc.example", [AppRole.ADMIN])


@pytest.fixture
async def patient_account(async_session: AsyncSession) -> PatientAccount:
    """Create a patient account linked to an auth user."""
    account = PatientAccount(
        user_id="7d1c6a3e-2f4b-4c8a-9e1d-5b6a7c8d9e0f",
        full_name="Pat Patient",
        email="pat@example.com",
    )
    async_session.add(account)
    await async_session.commit()
    await async_session.refresh(account)
    return account


def auth_headers_for(user_id: str) -> dict[str, str]:
    """Create authorization headers carrying ``user_id`` as subject."""
    token = create_access_token(subject=user_id, additional_claims={"email": "user@example.com"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def clinician_headers(clinician: Profile) -> dict[str, str]:
    return auth_headers_for(clinician.id)


@pytest.fixture
def admin_headers(admin: Profile) -> dict[str, str]:
    return auth_headers_for(admin.id)


@pytest.fixture
async def lead(async_session: AsyncSession) -> Lead:
    """Create a stored lead with a neuro category."""
    lead = Lead(
        name="Jane Doe",
        email="jane@example.com",
        system_category="concussion",
        primary_concern="concussion",
    )
    async_session.add(lead)
    await async_session.commit()
    await async_session.refresh(lead)
    return lead


@pytest.fixture
async def episode(async_session: AsyncSession) -> Episode:
    """Create an episode of care."""
    episode = Episode(
        patient_name="Sam Smith",
        episode_type="MSK",
        region="Neck",
        clinician="Dr. Lee",
        start_date=date(2024, 3, 1),
    )
    async_session.add(episode)
    await async_session.commit()
    await async_session.refresh(episode)
    return episode


@pytest.fixture
async def comparison_delivery(async_session: AsyncSession) -> ComparisonReportDelivery:
    """Create a sent comparison report delivery."""
    delivery = ComparisonReportDelivery(
        schedule_id="0b7f2d7e-3c1a-4f6e-8a2b-9c4d5e6f7a8b",
        user_id="1a2b3c4d-5e6f-4a8b-9c0d-1e2f3a4b5c6d",
        recipient_emails=["owner@ppc.example"],
        export_names=["Q1 outcomes"],
        status="sent",
        tracking_id="trk_comparison_001",
    )
    async_session.add(delivery)
    await async_session.commit()
    await async_session.refresh(delivery)
    return delivery


@pytest.fixture
async def notification(async_session: AsyncSession) -> NotificationHistory:
    """Create a sent patient notification."""
    notification = NotificationHistory(
        user_id="1a2b3c4d-5e6f-4a8b-9c0d-1e2f3a4b5c6d",
        episode_id="EP-2024-0001",
        notification_type="discharge",
        patient_name="Sam Smith",
        patient_email="sam@example.com",
        clinician_name="Dr. Lee",
        status="sent",
        tracking_id="trk_notification_001",
    )
    async_session.add(notification)
    await async_session.commit()
    await async_session.refresh(notification)
    return notification
