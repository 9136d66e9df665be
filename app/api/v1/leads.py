"""Lead intake and outreach endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from app.api.deps import DbSession, StaffUserId, get_client_ip
from app.rules.routing import get_routing_badge
from app.schemas.lead import (
    ContactAttemptCreate,
    ContactAttemptRead,
    LeadCreate,
    LeadCreateResponse,
    LeadRoutingRead,
)
from app.services.leads import LeadNotFoundError, LeadService, exam_type_for, route_lead

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=LeadCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a lead",
    responses={400: {"description": "Validation failed"}, 500: {"description": "Server error"}},
)
async def create_lead(payload: LeadCreate, request: Request, session: DbSession):
    """Public lead capture used by marketing pages and partner forms."""
    service = LeadService(session)
    try:
        lead = await service.create_lead(
            full_name=payload.full_name,
            email=payload.email,
            phone=payload.phone,
            primary_concern=payload.primary_concern,
            ip_address=get_client_ip(request),
            **payload.intake_fields(),
        )
    except Exception as e:
        logger.error(f"Failed to create lead: {e}")
        await session.rollback()
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    route = route_lead(lead)
    return LeadCreateResponse(
        lead_id=lead.id,
        suggested_episode_type=route.value,
        new_patient_exam_type=exam_type_for(route, lead.system_category).value,
    )


@router.get("/export.csv", summary="Export leads as CSV")
async def export_leads(session: DbSession, user_id: StaffUserId) -> Response:
    service = LeadService(session)
    leads = await service.list_leads()
    logger.info(f"Exporting {len(leads)} leads", extra={"user_id": user_id})

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return Response(
        content=service.export_csv(leads),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=leads_{stamp}.csv"},
    )


@router.get(
    "/{lead_id}/routing",
    response_model=LeadRoutingRead,
    summary="Routing suggestion for a lead",
)
async def get_lead_routing(lead_id: str, session: DbSession, user_id: StaffUserId):
    try:
        lead = await LeadService(session).get_lead(lead_id)
    except LeadNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    route = route_lead(lead)
    badge = get_routing_badge(route)
    return LeadRoutingRead(
        lead_id=lead.id,
        system_category=lead.system_category,
        primary_concern=lead.primary_concern,
        suggested_episode_type=route.value,
        badge_label=badge.label,
        badge_variant=badge.variant,
        new_patient_exam_type=exam_type_for(route, lead.system_category).value,
    )


@router.get(
    "/{lead_id}/contact-attempts",
    response_model=list[ContactAttemptRead],
    summary="List contact attempts",
)
async def list_contact_attempts(lead_id: str, session: DbSession, user_id: StaffUserId):
    return await LeadService(session).list_contact_attempts(lead_id)


@router.post(
    "/{lead_id}/contact-attempts",
    response_model=ContactAttemptRead,
    status_code=status.HTTP_201_CREATED,
    summary="Log a contact attempt",
)
async def create_contact_attempt(
    lead_id: str,
    payload: ContactAttemptCreate,
    session: DbSession,
    user_id: StaffUserId,
):
    """Log an outreach attempt and bump the lead's attempt counter."""
    try:
        return await LeadService(session).record_contact_attempt(
            lead_id,
            method=payload.method,
            notes=payload.notes,
            created_by=user_id,
            contacted_at=payload.contacted_at,
        )
    except LeadNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
