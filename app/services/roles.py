"""Role lookup and post-login routing."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import AppRole, PatientAccount, UserRole

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT = "/"


def resolve_post_login_redirect(roles: list[AppRole], is_patient: bool) -> str:
    """Pick the landing page for a freshly signed-in user.

    Staff roles win over a patient account. Among staff roles, admin or owner
    outranks clinician, which outranks professional_verified.
    """
    role_set = set(roles)

    if AppRole.ADMIN in role_set or AppRole.OWNER in role_set:
        return "/admin"
    if AppRole.CLINICIAN in role_set:
        return "/my-day"
    if AppRole.PROFESSIONAL_VERIFIED in role_set:
        return "/professional/outcomes"
    if is_patient:
        return "/patient-dashboard"
    return DEFAULT_REDIRECT


class RoleService:
    """Reads role grants for a user.

    Lookups never raise. A failed read is logged and treated as "no roles".
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_roles(self, user_id: str) -> list[AppRole]:
        """Return the roles granted to ``user_id``."""
        try:
            result = await self.session.execute(
                select(UserRole.role).where(UserRole.user_id == user_id)
            )
            roles = []
            for value in result.scalars().all():
                try:
                    roles.append(AppRole(value))
                except ValueError:
                    logger.warning(f"Ignoring unknown role '{value}' for user {user_id}")
            return roles
        except Exception as e:
            logger.error(f"Error fetching user roles for {user_id}: {e}")
            return []

    async def is_patient(self, user_id: str) -> bool:
        """Check whether a patient account is linked to ``user_id``."""
        try:
            result = await self.session.execute(
                select(PatientAccount.id).where(PatientAccount.user_id == user_id).limit(1)
            )
            return result.scalar_one_or_none() is not None
        except Exception as e:
            logger.error(f"Error checking patient account for {user_id}: {e}")
            return False

    async def has_any_role(self, user_id: str, roles: list[AppRole]) -> bool:
        """Check whether the user holds at least one of ``roles``."""
        granted = await self.get_roles(user_id)
        return any(role in granted for role in roles)

    async def get_redirect(self, user_id: str) -> str:
        """Resolve the post-login landing page for ``user_id``."""
        roles = await self.get_roles(user_id)
        is_patient = await self.is_patient(user_id)
        return resolve_post_login_redirect(roles, is_patient)
