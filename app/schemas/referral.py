"""Schemas for referral decision emails."""

from pydantic import BaseModel, EmailStr, Field


class ReferralApprovalEmail(BaseModel):
    """Approval email request for a referral inquiry."""

    inquiry_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr


class ReferralDeclineEmail(ReferralApprovalEmail):
    """Decline email request. The reason is inserted into the template."""

    reason: str | None = Field(None, max_length=2000)


class EmailSendResponse(BaseModel):
    success: bool = True
    message: str


class ClientIdResponse(BaseModel):
    client_id: str
