"""Primary care physician contact lookup."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.deps import OptionalUserId, get_client_ip
from app.schemas.pcp import PCPContactRead, PCPLookupRequest
from app.services.pcp_lookup import (
    DebouncedLookup,
    LookupSuperseded,
    PCPLookupError,
    PCPLookupService,
    get_pcp_debouncer,
    get_pcp_lookup_service,
    require_doctor_name,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/lookup",
    response_model=PCPContactRead,
    summary="Look up a physician's office contact details",
    responses={
        400: {"description": "Doctor name missing"},
        402: {"description": "AI service unavailable"},
        429: {"description": "Rate limited upstream"},
        500: {"description": "Lookup failed"},
    },
)
async def lookup_pcp(
    payload: PCPLookupRequest,
    request: Request,
    user_id: OptionalUserId,
    service: Annotated[PCPLookupService, Depends(get_pcp_lookup_service)],
    debouncer: Annotated[DebouncedLookup, Depends(get_pcp_debouncer)],
):
    """Debounced per requester. A request replaced by a newer one answers
    ``{"superseded": true}`` without calling the gateway.
    """
    try:
        doctor_name = require_doctor_name(payload.doctor_name)
    except PCPLookupError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})

    requester = user_id or get_client_ip(request) or "anonymous"

    try:
        contact = await debouncer.run(
            requester,
            lambda: service.lookup(doctor_name, payload.location),
        )
    except LookupSuperseded:
        return JSONResponse(status_code=200, content={"superseded": True})
    except PCPLookupError as e:
        logger.error(f"PCP lookup error: {e.message}", extra={"user_id": user_id})
        return JSONResponse(status_code=e.status_code, content={"error": e.message})

    return PCPContactRead(**contact.to_dict())
