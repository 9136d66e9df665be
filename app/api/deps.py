"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.user import AppRole
from app.services.roles import RoleService

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict | None:
    """Extract and decode the current JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        Decoded token payload or None
    """
    if not credentials:
        return None

    payload = decode_access_token(credentials.credentials)
    return payload


async def get_current_user_id(
    token: Annotated[dict | None, Depends(get_current_token)],
) -> str:
    """Return the authenticated user id from the ``sub`` claim.

    Raises:
        HTTPException: 401 if the token is missing, invalid or has no subject
    """
    if not token or not token.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return str(token["sub"])


async def get_optional_user_id(
    token: Annotated[dict | None, Depends(get_current_token)],
) -> str | None:
    """Return the user id if a valid token was sent, otherwise None."""
    if not token or not token.get("sub"):
        return None
    return str(token["sub"])


def require_roles(*roles: AppRole):
    """Create a dependency that requires at least one of ``roles``.

    Usage:
        @router.get("/", dependencies=[Depends(require_roles(AppRole.ADMIN))])

    Args:
        roles: Accepted roles (user must hold any one)

    Returns:
        Dependency function resolving to the user id
    """

    async def role_checker(
        user_id: Annotated[str, Depends(get_current_user_id)],
        session: Annotated[AsyncSession, Depends(get_db)],
    ) -> str:
        if not await RoleService(session).has_any_role(user_id, list(roles)):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user_id

    return role_checker


def get_client_ip(request: Request) -> str | None:
    """Extract client IP from request.

    Args:
        request: FastAPI request

    Returns:
        Client IP address or None
    """
    # Check for forwarded header (when behind proxy)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    # Fall back to direct client
    if request.client:
        return request.client.host

    return None


STAFF_ROLES = (AppRole.ADMIN, AppRole.OWNER, AppRole.CLINICIAN)

# Type aliases for cleaner dependency injection
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
OptionalUserId = Annotated[str | None, Depends(get_optional_user_id)]
StaffUserId = Annotated[str, Depends(require_roles(*STAFF_ROLES))]
DbSession = Annotated[AsyncSession, Depends(get_db)]
