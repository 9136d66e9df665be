"""Tests for role lookup and post-login redirect."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import AppRole, PatientAccount, Profile, UserRole
from app.services.roles import RoleService, resolve_post_login_redirect
from tests.conftest import auth_headers_for, create_profile

UNKNOWN_USER_ID = "0f0e0d0c-0b0a-4908-8706-050403020100"


class TestResolvePostLoginRedirect:
    """Tests for the landing page table."""

    @pytest.mark.parametrize(
        "roles,is_patient,expected",
        [
            ([AppRole.ADMIN], False, "/admin"),
            ([AppRole.OWNER], False, "/admin"),
            ([AppRole.CLINICIAN], False, "/my-day"),
            ([AppRole.PROFESSIONAL_VERIFIED], False, "/professional/outcomes"),
            ([], True, "/patient-dashboard"),
            ([], False, "/"),
        ],
    )
    def test_single_role(self, roles: list[AppRole], is_patient: bool, expected: str) -> None:
        assert resolve_post_login_redirect(roles, is_patient) == expected

    def test_admin_outranks_clinician(self) -> None:
        assert resolve_post_login_redirect([AppRole.CLINICIAN, AppRole.ADMIN], False) == "/admin"

    def test_staff_role_wins_over_patient_account(self) -> None:
        assert resolve_post_login_redirect([AppRole.CLINICIAN], True) == "/my-day"


class TestRoleService:
    """Tests for role and patient lookups."""

    @pytest.mark.asyncio
    async def test_get_roles(self, async_session: AsyncSession) -> None:
        profile = await create_profile(
            async_session, "owner@ppc.example", [AppRole.OWNER, AppRole.CLINICIAN]
        )

        roles = await RoleService(async_session).get_roles(profile.id)

        assert set(roles) == {AppRole.OWNER, AppRole.CLINICIAN}

    @pytest.mark.asyncio
    async def test_unknown_role_values_ignored(self, async_session: AsyncSession) -> None:
        profile = await create_profile(async_session, "legacy@ppc.example", [AppRole.CLINICIAN])
        async_session.add(UserRole(user_id=profile.id, role="front_desk"))
        await async_session.commit()

        roles = await RoleService(async_session).get_roles(profile.id)

        assert roles == [AppRole.CLINICIAN]

    @pytest.mark.asyncio
    async def test_is_patient(
        self,
        async_session: AsyncSession,
        patient_account: PatientAccount,
    ) -> None:
        service = RoleService(async_session)

        assert await service.is_patient(patient_account.user_id) is True
        assert await service.is_patient(UNKNOWN_USER_ID) is False

    @pytest.mark.asyncio
    async def test_lookup_failures_mean_no_access(self) -> None:
        session = AsyncMock()
        session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection refused"))
        )
        service = RoleService(session)

        assert await service.get_roles(UNKNOWN_USER_ID) == []
        assert await service.is_patient(UNKNOWN_USER_ID) is False
        assert await service.has_any_role(UNKNOWN_USER_ID, [AppRole.ADMIN]) is False
        assert await service.get_redirect(UNKNOWN_USER_ID) == "/"


class TestMeEndpoints:
    """Tests for /me/roles and /me/redirect."""

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient) -> None:
        for path in ("/api/v1/me/roles", "/api/v1/me/redirect"):
            response = await client.get(path)
            assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_rejected(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/v1/me/redirect",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_clinician_roles(
        self,
        client: AsyncClient,
        clinician: Profile,
        clinician_headers: dict[str, str],
    ) -> None:
        response = await client.get("/api/v1/me/roles", headers=clinician_headers)

        assert response.status_code == 200
        assert response.json() == {
            "user_id": clinician.id,
            "roles": ["clinician"],
            "is_admin": False,
            "is_clinician": True,
            "is_owner": False,
            "is_professional_verified": False,
            "is_patient": False,
        }

    @pytest.mark.asyncio
    async def test_redirects(
        self,
        client: AsyncClient,
        clinician_headers: dict[str, str],
        admin_headers: dict[str, str],
        patient_account: PatientAccount,
    ) -> None:
        cases = [
            (clinician_headers, "/my-day"),
            (admin_headers, "/admin"),
            (auth_headers_for(patient_account.user_id), "/patient-dashboard"),
            (auth_headers_for(UNKNOWN_USER_ID), "/"),
        ]

        for headers, expected in cases:
            response = await client.get("/api/v1/me/redirect", headers=headers)
            assert response.status_code == 200
            assert response.json() == {"redirect_to": expected}

    @pytest.mark.asyncio
    async def test_patient_flag(
        self,
        client: AsyncClient,
        patient_account: PatientAccount,
    ) -> None:
        response = await client.get(
            "/api/v1/me/roles",
            headers=auth_headers_for(patient_account.user_id),
        )

        data = response.json()
        assert data["roles"] == []
        assert data["is_patient"] is True
