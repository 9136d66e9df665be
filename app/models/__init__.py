"""Database models for the outcome registry."""

from app.models.audit_event import ActorType, AuditLog
from app.models.clinic import ClinicSettings
from app.models.episode import Episode, OutcomeScore, ScoreType
from app.models.lead import Lead, LeadContactAttempt
from app.models.messaging import ComparisonReportDelivery, NotificationHistory
from app.models.user import AppRole, PatientAccount, Profile, UserRole

__all__ = [
    # Users & roles
    "AppRole",
    "Profile",
    "UserRole",
    "PatientAccount",
    # Clinic
    "ClinicSettings",
    # Leads
    "Lead",
    "LeadContactAttempt",
    # Episodes & outcomes
    "Episode",
    "OutcomeScore",
    "ScoreType",
    # Delivery tracking
    "ComparisonReportDelivery",
    "NotificationHistory",
    # Audit
    "AuditLog",
    "ActorType",
]
