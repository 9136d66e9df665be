"""Email open and click tracking endpoints.

These are hit by mail clients, so they never fail: opens always get the
pixel and clicks always get a redirect.
"""

from fastapi import APIRouter, Query, Response
from fastapi.responses import RedirectResponse

from app.api.deps import DbSession
from app.services.tracking import (
    TRACKING_PIXEL,
    TRACKING_PIXEL_HEADERS,
    TrackingService,
    resolve_redirect_target,
)

router = APIRouter()


def pixel_response() -> Response:
    return Response(
        content=TRACKING_PIXEL,
        media_type="image/gif",
        headers=TRACKING_PIXEL_HEADERS,
    )


def redirect_response(url: str | None) -> RedirectResponse:
    return RedirectResponse(url=resolve_redirect_target(url), status_code=302)


@router.get("/comparison-open", summary="Comparison report open pixel")
async def comparison_open(
    session: DbSession,
    tracking_id: str | None = Query(None, alias="id"),
) -> Response:
    await TrackingService(session).record_comparison_open(tracking_id)
    return pixel_response()


@router.get("/comparison-click", summary="Comparison report link click")
async def comparison_click(
    session: DbSession,
    tracking_id: str | None = Query(None, alias="id"),
    url: str | None = Query(None),
    label: str | None = Query(None),
) -> RedirectResponse:
    await TrackingService(session).record_comparison_click(tracking_id, label)
    return redirect_response(url)


@router.get("/email-open", summary="Notification email open pixel")
async def email_open(
    session: DbSession,
    tracking_id: str | None = Query(None, alias="id"),
) -> Response:
    await TrackingService(session).record_notification_open(tracking_id)
    return pixel_response()


@router.get("/link-click", summary="Notification email link click")
async def link_click(
    session: DbSession,
    notification_id: str | None = Query(None, alias="nid"),
    url: str | None = Query(None),
    label: str | None = Query(None),
) -> RedirectResponse:
    await TrackingService(session).record_notification_click(notification_id, label)
    return redirect_response(url)
