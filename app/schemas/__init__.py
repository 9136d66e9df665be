"""Pydantic schemas for request/response validation."""

from app.schemas.lead import (
    ContactAttemptCreate,
    ContactAttemptRead,
    LeadCreate,
    LeadCreateResponse,
)
from app.schemas.outcomes import EpisodeOutcomeSummary, MCIDCheckRequest
from app.schemas.pcp import PCPContactRead, PCPLookupRequest
from app.schemas.referral import ReferralApprovalEmail, ReferralDeclineEmail
from app.schemas.roles import RedirectRead, UserRolesRead

__all__ = [
    "LeadCreate",
    "LeadCreateResponse",
    "ContactAttemptCreate",
    "ContactAttemptRead",
    "MCIDCheckRequest",
    "EpisodeOutcomeSummary",
    "PCPLookupRequest",
    "PCPContactRead",
    "ReferralApprovalEmail",
    "ReferralDeclineEmail",
    "UserRolesRead",
    "RedirectRead",
]
