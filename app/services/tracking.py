"""Email open and click tracking.

Tracking is best-effort. A failed lookup or update is logged and reported as
"not recorded", but the caller still serves the pixel or redirect. Counter
increments are read-modify-write without locking. Concurrent opens of the same
delivery may lose an increment, and that is accepted.
"""

import base64
import logging
from typing import Literal
from urllib.parse import quote, unquote, urlparse

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.base import utc_now
from app.models.messaging import ComparisonReportDelivery, NotificationHistory

logger = logging.getLogger(__name__)

# 1x1 transparent GIF
TRACKING_PIXEL = base64.b64decode(
    "R0lGODlhAQABAIAAAP///wAAACH5BAEAAAAALAAAAAABAAEAAAICRAEAOw=="
)

TRACKING_PIXEL_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, private",
    "Pragma": "no-cache",
    "Expires": "0",
}

TrackedModel = type[ComparisonReportDelivery] | type[NotificationHistory]
EventKind = Literal["open", "click"]


def resolve_redirect_target(url: str | None) -> str:
    """Return the URL a tracked click should land on.

    Falls back to the app origin when the target is missing or is not an
    http(s) URL.
    """
    if not url:
        return settings.app_url

    target = url if "://" in url else unquote(url)
    if urlparse(target).scheme not in ("http", "https"):
        return settings.app_url
    return target


def build_tracking_pixel_url(tracking_id: str, kind: str = "email") -> str:
    """URL of the open-tracking pixel to embed in an email."""
    path = "comparison-open" if kind == "comparison" else "email-open"
    return f"{settings.public_base_url.rstrip('/')}/api/v1/track/{path}?id={quote(tracking_id)}"


def build_tracking_link(
    url: str,
    label: str,
    tracking_id: str | None = None,
    notification_id: str | None = None,
) -> str:
    """Wrap a link so the click is counted before redirecting.

    Comparison reports are keyed by tracking id, notifications by row id.
    """
    base = f"{settings.public_base_url.rstrip('/')}/api/v1/track"
    target = f"url={quote(url, safe='')}&label={quote(label, safe='')}"
    if notification_id:
        return f"{base}/link-click?nid={quote(notification_id)}&{target}"
    return f"{base}/comparison-click?id={quote(tracking_id or '')}&{target}"


class TrackingService:
    """Records opens and clicks against delivery rows."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _rollback_quietly(self) -> None:
        try:
            await self.session.rollback()
        except Exception as e:
            logger.error(f"Rollback after tracking failure failed: {e}")

    async def _record(
        self,
        model: TrackedModel,
        key_column: str,
        key: str | None,
        kind: EventKind,
        label: str | None = None,
    ) -> bool:
        """Increment the counter on the row matching ``key``.

        Returns True when a row was updated.
        """
        if not key:
            logger.warning(f"Tracking {kind} on {model.__tablename__} without identifier")
            return False

        try:
            result = await self.session.execute(
                select(model).where(getattr(model, key_column) == key)
            )
            row = result.scalar_one_or_none()

            if row is None:
                logger.warning(
                    f"No {model.__tablename__} row for {key_column}={key}",
                    extra={"tracking_id": key},
                )
                return False

            row_id = row.id
            if kind == "open":
                row.record_open(utc_now())
            else:
                row.record_click(utc_now())

            await self.session.commit()
            logger.info(
                f"Recorded {kind} on {model.__tablename__} {row_id}"
                + (f" ({label})" if label else ""),
                extra={"tracking_id": key},
            )
            return True

        except Exception as e:
            logger.error(
                f"Failed to record {kind} on {model.__tablename__} ({key_column}={key}): {e}",
                extra={"tracking_id": key},
            )
            await self._rollback_quietly()
            return False

    async def record_comparison_open(self, tracking_id: str | None) -> bool:
        """Count an open of a comparison report email."""
        return await self._record(ComparisonReportDelivery, "tracking_id", tracking_id, "open")

    async def record_comparison_click(
        self, tracking_id: str | None, label: str | None = None
    ) -> bool:
        """Count a link click in a comparison report email."""
        return await self._record(
            ComparisonReportDelivery, "tracking_id", tracking_id, "click", label
        )

    async def record_notification_open(self, tracking_id: str | None) -> bool:
        """Count an open of a patient notification email."""
        return await self._record(NotificationHistory, "tracking_id", tracking_id, "open")

    async def record_notification_click(
        self, notification_id: str | None, label: str | None = None
    ) -> bool:
        """Count a link click in a patient notification email."""
        return await self._record(NotificationHistory, "id", notification_id, "click", label)
