"""Business logic services."""

from app.services.audit import write_audit_log
from app.services.leads import LeadNotFoundError, LeadService
from app.services.messaging import ReferralEmailService, ResendEmailProvider
from app.services.outcomes import OutcomeService
from app.services.roles import RoleService, resolve_post_login_redirect
from app.services.tracking import TrackingService

__all__ = [
    "write_audit_log",
    "LeadService",
    "LeadNotFoundError",
    "ReferralEmailService",
    "ResendEmailProvider",
    "OutcomeService",
    "RoleService",
    "resolve_post_login_redirect",
    "TrackingService",
]
