"""Slack incoming-webhook sink"""

from __future__ import annotations

import httpx

from drivehook.errors import DispatchFailed
from drivehook.schemas import NotificationMessage


async def dispatch(
    client: httpx.AsyncClient,
    webhook_url: str,
    message: NotificationMessage,
) -> None:
    """Single POST of ``message`` to the webhook. No retry."""
    if not webhook_url:
        raise DispatchFailed("SLACK_WEBHOOK_URL is not configured")
    try:
        resp = await client.post(
            webhook_url,
            json=message.to_slack_payload(),
            headers={"Content-Type": "application/json"},
        )
    except httpx.HTTPError as exc:
        raise DispatchFailed(f"Slack request failed: {exc}") from exc
    if resp.status_code >= 300:
        raise DispatchFailed(f"Slack error: {resp.status_code} {resp.text}")
