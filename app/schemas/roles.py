"""Schemas for the signed-in user's roles."""

from pydantic import BaseModel


class UserRolesRead(BaseModel):
    """Roles held by the current user with convenience flags."""

    user_id: str
    roles: list[str]
    is_admin: bool
    is_clinician: bool
    is_owner: bool
    is_professional_verified: bool
    is_patient: bool


class RedirectRead(BaseModel):
    redirect_to: str
