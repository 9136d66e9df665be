"""Public configuration handed to third-party integrations."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.schemas.referral import ClientIdResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/google-client-id",
    response_model=ClientIdResponse,
    summary="Google OAuth client id",
    responses={500: {"description": "Client id not configured"}},
)
async def google_client_id():
    """Return the public Google OAuth client id used for calendar sync."""
    client_id = get_settings().google_client_id
    if not client_id:
        logger.error("Google Client ID requested but not configured")
        return JSONResponse(
            status_code=500,
            content={"error": "Google Client ID not configured"},
        )
    return ClientIdResponse(client_id=client_id)
