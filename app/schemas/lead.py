"""Pydantic schemas for lead intake and routing."""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-'\.]{1,100}$")
PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)\.]{7,20}$")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

MAX_TEXT_LENGTH = 500


def sanitize_text(value: Any) -> str | None:
    """Trim, strip control characters, cap length. Empty becomes None.

    Raises ValueError when the text contains angle brackets.
    """
    if value is None:
        return None
    text = _CONTROL_CHARS.sub("", str(value)).strip()
    if "<" in text or ">" in text:
        raise ValueError("must not contain < or >")
    return text[:MAX_TEXT_LENGTH] or None


class LeadCreate(BaseModel):
    """Public lead submission.

    At least one of email or phone is required.
    """

    full_name: str = Field(
        None,
        validate_default=True,
        description="Letters, spaces, hyphens, apostrophes and periods",
    )
    email: EmailStr | None = None
    phone: str | None = None

    who_is_this_for: str | None = None
    primary_concern: str | None = None
    symptom_summary: str | None = None
    preferred_contact_method: str | None = None
    notes: str | None = None

    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    utm_content: str | None = None
    origin_page: str | None = None
    origin_cta: str | None = None
    pillar_origin: str | None = None

    @field_validator("full_name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> str:
        name = str(value or "").strip()
        if not name:
            raise ValueError("full_name is required")
        if not NAME_PATTERN.match(name):
            raise ValueError("Name contains invalid characters")
        return name

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if len(value) > 255:
                raise ValueError("Email must be at most 255 characters")
            return value or None
        return value

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, value: Any) -> str | None:
        if value is None:
            return None
        phone = str(value).strip()
        if not phone:
            return None
        if not PHONE_PATTERN.match(phone):
            raise ValueError("Invalid phone number format")
        return phone

    @field_validator(
        "who_is_this_for",
        "primary_concern",
        "symptom_summary",
        "preferred_contact_method",
        "notes",
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_content",
        "origin_page",
        "origin_cta",
        "pillar_origin",
        mode="before",
    )
    @classmethod
    def clean_text(cls, value: Any) -> str | None:
        return sanitize_text(value)

    @model_validator(mode="after")
    def require_contact(self) -> "LeadCreate":
        if not self.email and not self.phone:
            raise ValueError("At least one of email or phone is required")
        return self

    def intake_fields(self) -> dict[str, str | None]:
        """Fields passed through to the lead service."""
        return self.model_dump(exclude={"full_name", "email", "phone", "primary_concern"})


class LeadCreateResponse(BaseModel):
    """Response after creating a lead."""

    success: bool = True
    lead_id: str
    suggested_episode_type: str
    new_patient_exam_type: str


class RoutingSuggestRequest(BaseModel):
    """Inputs for a routing suggestion."""

    system_category: str | None = None
    primary_concern: str | None = None


class RoutingSuggestion(BaseModel):
    """Routing suggestion with its admin badge."""

    suggested_episode_type: str
    badge_label: str
    badge_variant: str
    new_patient_exam_type: str


class LeadRoutingRead(RoutingSuggestion):
    """Routing suggestion for a stored lead."""

    lead_id: str
    system_category: str | None = None
    primary_concern: str | None = None


class ComplaintClassifyRequest(BaseModel):
    """Chief complaint to classify."""

    chief_complaint: str = Field(..., min_length=1, max_length=2000)


class ComplaintClassification(BaseModel):
    """Episode classification of a chief complaint."""

    episode_type: str
    body_region: str | None = None
    confidence: str
    label: str


class ContactAttemptCreate(BaseModel):
    """Outreach attempt logged by staff."""

    method: str = Field(..., min_length=1, max_length=30, description="phone, email, text, ...")
    notes: str | None = Field(None, max_length=2000)
    contacted_at: datetime | None = None


class ContactAttemptRead(BaseModel):
    """Logged outreach attempt."""

    id: str
    lead_id: str
    attempt_number: int
    method: str
    notes: str | None = None
    contacted_at: datetime
    created_by: str | None = None

    model_config = {"from_attributes": True}
