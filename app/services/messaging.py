"""Transactional email for referral decisions.

Handles template rendering against clinic settings and delivery through a
Resend-compatible HTTP provider.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.clinic import ClinicSettings

logger = logging.getLogger(__name__)


class MessageProviderError(Exception):
    """Raised when the email provider rejects or fails a send."""

    pass


class ClinicSettingsNotFoundError(Exception):
    """Raised when no clinic settings row exists."""

    def __init__(self) -> None:
        super().__init__("Clinic settings not found")


class MessageProvider(ABC):
    """Abstract base class for email providers."""

    @abstractmethod
    async def send(
        self,
        recipient: str,
        subject: str,
        html_body: str,
        from_name: str | None = None,
    ) -> tuple[str | None, dict]:
        """Send a message and return (provider_message_id, metadata).

        Raises MessageProviderError on failure.
        """
        pass


class ResendEmailProvider(MessageProvider):
    """Email provider speaking the Resend ``POST /emails`` API."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        from_address: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.api_url = api_url or settings.resend_api_url
        self.from_address = from_address or settings.email_from_address
        self.timeout = timeout or settings.email_timeout_seconds
        self.transport = transport

    async def send(
        self,
        recipient: str,
        subject: str,
        html_body: str,
        from_name: str | None = None,
    ) -> tuple[str | None, dict]:
        """Send an HTML email."""
        if not self.api_key:
            raise MessageProviderError("RESEND_API_KEY is not configured")

        sender = f"{from_name} <{self.from_address}>" if from_name else self.from_address
        payload = {
            "from": sender,
            "to": [recipient],
            "subject": subject,
            "html": html_body,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Email provider request failed: {e}")
            raise MessageProviderError(f"Failed to send email: {e}") from e

        if not response.is_success:
            logger.error(f"Resend error: {response.status_code} {response.text}")
            raise MessageProviderError(f"Failed to send email: {response.text}")

        data = response.json() if response.content else {}
        logger.info(f"Sent email to {recipient}: {subject}")
        return data.get("id"), {"provider": "resend", "from": sender, "to": recipient}


def get_email_provider() -> MessageProvider:
    """Dependency returning the configured email provider."""
    return ResendEmailProvider()


def render_template(template: str, context: dict[str, Any]) -> str:
    """Replace ``{{key}}`` placeholders with context values."""
    rendered = template
    for key, value in context.items():
        rendered = rendered.replace(f"{{{{{key}}}}}", str(value))
    return rendered


DEFAULT_APPROVAL_SUBJECT = "Welcome to {{clinic_name}} - Your Next Steps Inside"

DEFAULT_APPROVAL_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="color: #2563eb;">Welcome to {{clinic_name}}!</h1>
  <p>Hi {{name}},</p>
  <p>Great news! After reviewing your inquiry, we're confident we can help you.
  Our clinical team is looking forward to working with you.</p>
  <ol>
    <li><strong>Complete your intake form</strong> (about 10-15 minutes)</li>
    <li><strong>Schedule your first appointment</strong></li>
    <li><strong>Prepare for your visit</strong>: bring comfortable clothing and any relevant records</li>
  </ol>
  <p style="text-align: center;">
    <a href="{{intake_link}}" style="background-color: #2563eb; color: white; padding: 15px 40px;
       text-decoration: none; border-radius: 6px; font-weight: bold;">Complete Your Intake Form</a>
  </p>
  <p>Questions? Call us at {{clinic_phone}} or email {{clinic_email}}.</p>
  <p>We look forward to seeing you soon!<br><strong>The {{clinic_name}} Team</strong></p>
</div>
"""

DEFAULT_DECLINE_SUBJECT = "Your inquiry with {{clinic_name}}"

DEFAULT_DECLINE_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <p>Hi {{name}},</p>
  <p>Thank you for reaching out to {{clinic_name}}. After reviewing your inquiry,
  we don't believe we are the best fit for your needs at this time.</p>
  <p>{{reason}}</p>
  <p>We recommend following up with your primary care provider, who can help
  direct you to the right specialist.</p>
  <p>If you have questions, call us at {{clinic_phone}} or email {{clinic_email}}.</p>
  <p>Wishing you the best,<br><strong>The {{clinic_name}} Team</strong></p>
</div>
"""

# Older saved templates point buttons at pages that no longer host the intake form
_LEGACY_INTAKE_HREF = re.compile(r'href="[^"]*(?:patient-welcome|patient-dashboard)[^"]*"')


class ReferralEmailService:
    """Sends approval and decline emails for referral inquiries."""

    def __init__(self, session: AsyncSession, provider: MessageProvider):
        self.session = session
        self.provider = provider

    async def get_clinic_settings(self) -> ClinicSettings:
        """Load the clinic settings row used for templates."""
        result = await self.session.execute(
            select(ClinicSettings).order_by(ClinicSettings.created_at).limit(1)
        )
        clinic = result.scalar_one_or_none()
        if clinic is None:
            raise ClinicSettingsNotFoundError()
        return clinic

    @staticmethod
    def intake_link() -> str:
        """Link to the public intake form."""
        return f"{settings.app_url.rstrip('/')}/patient-intake?source=referral_approval"

    @staticmethod
    def _base_context(clinic: ClinicSettings, name: str) -> dict[str, Any]:
        return {
            "name": name,
            "clinic_name": clinic.clinic_name,
            "clinic_phone": clinic.phone or "",
            "clinic_email": clinic.email or "",
        }

    async def send_approval(self, name: str, email: str) -> str | None:
        """Send the approval email and return the provider message id."""
        clinic = await self.get_clinic_settings()
        intake_link = self.intake_link()
        context = {**self._base_context(clinic, name), "intake_link": intake_link}

        body = render_template(
            clinic.referral_approval_email_template or DEFAULT_APPROVAL_TEMPLATE,
            context,
        )
        body = _LEGACY_INTAKE_HREF.sub(f'href="{intake_link}"', body)
        subject = render_template(
            clinic.referral_approval_email_subject or DEFAULT_APPROVAL_SUBJECT,
            context,
        )

        message_id, _ = await self.provider.send(
            recipient=email,
            subject=subject,
            html_body=body,
            from_name=clinic.clinic_name,
        )
        return message_id

    async def send_decline(
        self,
        name: str,
        email: str,
        reason: str | None = None,
    ) -> str | None:
        """Send the decline email and return the provider message id."""
        clinic = await self.get_clinic_settings()
        context = {**self._base_context(clinic, name), "reason": reason or ""}

        body = render_template(
            clinic.referral_decline_email_template or DEFAULT_DECLINE_TEMPLATE,
            context,
        )
        subject = render_template(
            clinic.referral_decline_email_subject or DEFAULT_DECLINE_SUBJECT,
            context,
        )

        message_id, _ = await self.provider.send(
            recipient=email,
            subject=subject,
            html_body=body,
            from_name=clinic.clinic_name,
        )
        return message_id
