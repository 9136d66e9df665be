"""Endpoints describing the signed-in user."""

from fastapi import APIRouter

from app.api.deps import CurrentUserId, DbSession
from app.models.user import AppRole
from app.schemas.roles import RedirectRead, UserRolesRead
from app.services.roles import RoleService

router = APIRouter()


@router.get("/roles", response_model=UserRolesRead, summary="Current user's roles")
async def get_my_roles(user_id: CurrentUserId, session: DbSession) -> UserRolesRead:
    service = RoleService(session)
    roles = await service.get_roles(user_id)
    is_patient = await service.is_patient(user_id)

    return UserRolesRead(
        user_id=user_id,
        roles=[role.value for role in roles],
        is_admin=AppRole.ADMIN in roles,
        is_clinician=AppRole.CLINICIAN in roles,
        is_owner=AppRole.OWNER in roles,
        is_professional_verified=AppRole.PROFESSIONAL_VERIFIED in roles,
        is_patient=is_patient,
    )


@router.get("/redirect", response_model=RedirectRead, summary="Post-login landing page")
async def get_my_redirect(user_id: CurrentUserId, session: DbSession) -> RedirectRead:
    """Resolve where the client should send a user after sign-in."""
    redirect_to = await RoleService(session).get_redirect(user_id)
    return RedirectRead(redirect_to=redirect_to)
