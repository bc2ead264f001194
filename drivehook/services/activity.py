"""Drive Activity API client."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from drivehook.errors import QueryFailed
from drivehook.schemas import ActivityQueryResponse, ChangeActivity
from drivehook.services.google_auth import auth_headers

logger = logging.getLogger(__name__)

DRIVE_ACTIVITY_API = "https://driveactivity.googleapis.com/v2/activity:query"
DEFAULT_LOOKBACK = dt.timedelta(minutes=20)

JSONDict = dict[str, Any]


def _iso_utc(moment: dt.datetime) -> str:
    """RFC 3339 with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(dt.timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_query(
    drive_id: str,
    lookback: dt.timedelta = DEFAULT_LOOKBACK,
    page_size: int = 1,
    *,
    now: Optional[dt.datetime] = None,
) -> JSONDict:
    """
    Request body for ``activity:query``: newest-first activity under the drive
    with a timestamp strictly after ``now - lookback``, legacy consolidation.
    """
    current = now or dt.datetime.now(dt.timezone.utc)
    since = _iso_utc(current - lookback)
    return {
        "ancestorName": f"items/{drive_id}",
        "consolidationStrategy": {"legacy": {}},
        "pageSize": page_size,
        "filter": f'time > "{since}"',
    }


async def query_activities(
    client: httpx.AsyncClient,
    token: str,
    body: JSONDict,
) -> ActivityQueryResponse:
    """One page of ``activity:query``; never follows ``nextPageToken``."""
    try:
        resp = await client.post(DRIVE_ACTIVITY_API, json=body, headers=auth_headers(token))
    except httpx.HTTPError as exc:
        raise QueryFailed(f"Drive Activity request failed: {exc}") from exc
    if resp.status_code >= 300:
        raise QueryFailed(f"Drive Activity error: {resp.status_code} {resp.text}")
    try:
        return ActivityQueryResponse.model_validate(resp.json())
    except (ValueError, ValidationError) as exc:
        raise QueryFailed(f"Drive Activity returned an unreadable body: {exc}") from exc


async def query_recent_activity(
    client: httpx.AsyncClient,
    token: str,
    drive_id: str,
    lookback: dt.timedelta = DEFAULT_LOOKBACK,
    page_size: int = 1,
) -> Optional[ChangeActivity]:
    """Newest activity for ``drive_id`` inside the lookback window, or None."""
    body = build_query(drive_id, lookback, page_size)
    logger.debug("Querying drive activity with filter %s", body["filter"])
    result = await query_activities(client, token, body)
    if not result.activities:
        return None
    return result.activities[0]
