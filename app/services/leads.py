"""Lead intake, routing and outreach tracking."""

import csv
import io
import logging
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import utc_now
from app.models.audit_event import ActorType
from app.models.lead import Lead, LeadContactAttempt
from app.rules.routing import (
    EpisodeTypeRoute,
    NewPatientExamType,
    get_new_patient_exam_type,
    get_suggested_episode_type,
)
from app.services.audit import write_audit_log

logger = logging.getLogger(__name__)

# Intake fields that have no column on ``leads`` but are kept in the audit trail
EXTRA_INTAKE_FIELDS = (
    "who_is_this_for",
    "symptom_summary",
    "preferred_contact_method",
    "notes",
)

ATTRIBUTION_FIELDS = (
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "origin_page",
    "origin_cta",
    "pillar_origin",
)

EXPORT_COLUMNS = (
    "id",
    "created_at",
    "name",
    "email",
    "phone",
    "system_category",
    "checkpoint_status",
    "funnel_stage",
    "lead_status",
    "contact_attempt_count",
    "last_contacted_at",
    "suggested_episode_type",
    "new_patient_exam_type",
    "utm_source",
    "utm_campaign",
    "origin_page",
)


class LeadNotFoundError(Exception):
    """Raised when a lead does not exist."""

    def __init__(self, lead_id: str):
        self.lead_id = lead_id
        super().__init__(f"Lead {lead_id} not found")


def route_lead(lead: Lead) -> EpisodeTypeRoute:
    """Suggest an episode type for a stored lead."""
    return get_suggested_episode_type(lead.system_category, lead.primary_concern)


def exam_type_for(route: EpisodeTypeRoute, system_category: str | None) -> NewPatientExamType:
    """Map a routing suggestion to the new patient exam label."""
    route_label = None if route == EpisodeTypeRoute.UNKNOWN else route.value
    return get_new_patient_exam_type(route_label, system_category)


class LeadService:
    """Service for lead intake and contact attempts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_lead(
        self,
        full_name: str,
        email: str | None = None,
        phone: str | None = None,
        primary_concern: str | None = None,
        ip_address: str | None = None,
        **intake: Any,
    ) -> Lead:
        """Store a lead submitted from a public form.

        The primary concern doubles as the system category used for routing.
        Writing the audit row is best-effort and never fails the submission.

        Args:
            full_name: Name as entered
            email: Contact email
            phone: Contact phone
            primary_concern: Concern picked on the form
            ip_address: Submitting client IP
            **intake: Attribution fields and extra intake answers

        Returns:
            The persisted Lead
        """
        lead = Lead(
            name=full_name,
            email=email or None,
            phone=phone or None,
            system_category=primary_concern or None,
            primary_concern=primary_concern or None,
            checkpoint_status="lead_created",
            funnel_stage="lead",
            **{field: intake.get(field) or None for field in ATTRIBUTION_FIELDS},
            **{field: intake.get(field) or None for field in EXTRA_INTAKE_FIELDS},
        )
        self.session.add(lead)
        await self.session.commit()
        await self.session.refresh(lead)

        logger.info("Lead created via API", extra={"lead_id": lead.id})

        snapshot = {
            "name": lead.name,
            "email": lead.email,
            "phone": lead.phone,
            "system_category": lead.system_category,
            "checkpoint_status": lead.checkpoint_status,
            "funnel_stage": lead.funnel_stage,
            **{field: getattr(lead, field) for field in ATTRIBUTION_FIELDS},
            "source": "create-lead-api",
            "_extra": {field: intake.get(field) for field in EXTRA_INTAKE_FIELDS},
        }
        try:
            await write_audit_log(
                self.session,
                actor_type=ActorType.PUBLIC,
                actor_id=None,
                action="lead_created_via_api",
                table_name="leads",
                record_id=lead.id,
                new_data=snapshot,
                ip_address=ip_address,
            )
        except Exception as e:
            logger.error(f"Audit log error (non-fatal): {e}", extra={"lead_id": lead.id})
            await self.session.rollback()
            await self.session.refresh(lead)

        return lead

    async def get_lead(self, lead_id: str) -> Lead:
        """Load a lead or raise LeadNotFoundError."""
        result = await self.session.execute(select(Lead).where(Lead.id == lead_id))
        lead = result.scalar_one_or_none()
        if lead is None:
            raise LeadNotFoundError(lead_id)
        return lead

    async def list_leads(self, limit: int = 1000) -> Sequence[Lead]:
        """List leads, newest first."""
        result = await self.session.execute(
            select(Lead).order_by(Lead.created_at.desc()).limit(limit)
        )
        return result.scalars().all()

    async def list_contact_attempts(self, lead_id: str) -> list[LeadContactAttempt]:
        """Return contact attempts for a lead, newest first.

        Read failures are logged and yield an empty list.
        """
        try:
            result = await self.session.execute(
                select(LeadContactAttempt)
                .where(LeadContactAttempt.lead_id == lead_id)
                .order_by(LeadContactAttempt.contacted_at.desc())
            )
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Error fetching contact attempts: {e}", extra={"lead_id": lead_id})
            return []

    async def record_contact_attempt(
        self,
        lead_id: str,
        method: str,
        notes: str | None = None,
        created_by: str | None = None,
        contacted_at: datetime | None = None,
    ) -> LeadContactAttempt:
        """Log an outreach attempt and bump the lead's counters."""
        lead = await self.get_lead(lead_id)

        result = await self.session.execute(
            select(func.max(LeadContactAttempt.attempt_number)).where(
                LeadContactAttempt.lead_id == lead_id
            )
        )
        previous = result.scalar() or 0
        when = contacted_at or utc_now()

        attempt = LeadContactAttempt(
            lead_id=lead_id,
            attempt_number=previous + 1,
            method=method,
            notes=notes,
            contacted_at=when,
            created_by=created_by,
        )
        self.session.add(attempt)

        lead.contact_attempt_count = attempt.attempt_number
        lead.last_contacted_at = when
        if lead.lead_status in (None, "new"):
            lead.lead_status = "attempting"

        await self.session.commit()
        await self.session.refresh(attempt)

        logger.info(
            f"Logged contact attempt #{attempt.attempt_number} via {method}",
            extra={"lead_id": lead_id, "user_id": created_by},
        )
        return attempt

    @staticmethod
    def export_csv(leads: Sequence[Lead]) -> str:
        """Render leads with their routing suggestion as CSV."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()

        for lead in leads:
            route = route_lead(lead)
            row = {column: getattr(lead, column, None) for column in EXPORT_COLUMNS}
            row["suggested_episode_type"] = route.value
            row["new_patient_exam_type"] = exam_type_for(route, lead.system_category).value
            for column in ("created_at", "last_contacted_at"):
                if row[column] is not None:
                    row[column] = row[column].isoformat()
            writer.writerow(row)

        return output.getvalue()
