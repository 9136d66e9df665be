"""Referral decision email endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import DbSession, OptionalUserId, get_client_ip
from app.models.audit_event import ActorType
from app.schemas.referral import (
    EmailSendResponse,
    ReferralApprovalEmail,
    ReferralDeclineEmail,
)
from app.services.audit import write_audit_log
from app.services.messaging import (
    ClinicSettingsNotFoundError,
    MessageProvider,
    MessageProviderError,
    ReferralEmailService,
    get_email_provider,
)

logger = logging.getLogger(__name__)

router = APIRouter()

EmailProvider = Annotated[MessageProvider, Depends(get_email_provider)]


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def audit_send(
    session: AsyncSession,
    action: str,
    payload: ReferralApprovalEmail,
    message_id: str | None,
    actor_id: str | None,
    ip_address: str | None,
) -> None:
    """Record a sent referral email. Failure to audit does not fail the send."""
    try:
        await write_audit_log(
            session,
            actor_type=ActorType.STAFF if actor_id else ActorType.SYSTEM,
            actor_id=actor_id,
            action=action,
            table_name="referral_inquiries",
            record_id=payload.inquiry_id,
            new_data={"recipient": payload.email, "provider_message_id": message_id},
            ip_address=ip_address,
        )
    except Exception as e:
        logger.error(f"Failed to audit {action} for inquiry {payload.inquiry_id}: {e}")
        await session.rollback()


@router.post(
    "/approval-email",
    response_model=EmailSendResponse,
    summary="Send referral approval email",
    responses={500: {"description": "Send failed"}},
)
async def send_approval_email(
    payload: ReferralApprovalEmail,
    request: Request,
    session: DbSession,
    provider: EmailProvider,
    user_id: OptionalUserId,
):
    """Email the intake link to an approved referral."""
    service = ReferralEmailService(session, provider)
    try:
        message_id = await service.send_approval(payload.name, payload.email)
    except (ClinicSettingsNotFoundError, MessageProviderError) as e:
        logger.error(f"Approval email for inquiry {payload.inquiry_id} failed: {e}")
        return error_response(str(e))

    await audit_send(
        session,
        "referral_approval_email_sent",
        payload,
        message_id,
        user_id,
        get_client_ip(request),
    )
    return EmailSendResponse(message="Approval email sent successfully")


@router.post(
    "/decline-email",
    response_model=EmailSendResponse,
    summary="Send referral decline email",
    responses={500: {"description": "Send failed"}},
)
async def send_decline_email(
    payload: ReferralDeclineEmail,
    request: Request,
    session: DbSession,
    provider: EmailProvider,
    user_id: OptionalUserId,
):
    """Let a declined referral know the practice is not the right fit."""
    service = ReferralEmailService(session, provider)
    try:
        message_id = await service.send_decline(payload.name, payload.email, payload.reason)
    except (ClinicSettingsNotFoundError, MessageProviderError) as e:
        logger.error(f"Decline email for inquiry {payload.inquiry_id} failed: {e}")
        return error_response(str(e))

    await audit_send(
        session,
        "referral_decline_email_sent",
        payload,
        message_id,
        user_id,
        get_client_ip(request),
    )
    return EmailSendResponse(message="Decline email sent successfully")
