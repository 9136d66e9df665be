"""Append-only audit logging."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import audit_logger
from app.models.audit_event import ActorType, AuditLog


async def write_audit_log(
    session: AsyncSession,
    actor_type: ActorType,
    actor_id: str | None,
    action: str,
    table_name: str,
    record_id: str | None,
    new_data: dict[str, Any] | None = None,
    description: str | None = None,
    ip_address: str | None = None,
) -> AuditLog:
    """Write an audit log row and mirror it to the audit logger.

    Args:
        session: Database session
        actor_type: Type of actor (system, staff, public)
        actor_id: Auth user id of the actor, if any
        action: Action performed (e.g. "lead_created_via_api")
        table_name: Table the action touched
        record_id: Primary key of the affected row
        new_data: JSON snapshot of what was written
        description: Human-readable description
        ip_address: Client IP address

    Returns:
        Created AuditLog instance
    """
    entry = AuditLog(
        actor_type=actor_type,
        actor_id=actor_id,
        action=action,
        table_name=table_name,
        record_id=record_id,
        new_data=new_data,
        description=description,
        ip_address=ip_address,
    )

    session.add(entry)
    await session.commit()

    audit_logger.log(
        action=action,
        actor_type=actor_type.value,
        actor_id=actor_id,
        table_name=table_name,
        record_id=record_id,
        metadata=new_data,
    )

    return entry
