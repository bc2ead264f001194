"""Router for Drive push notifications"""

from __future__ import annotations

import hmac
import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, Header
from fastapi.responses import PlainTextResponse

from drivehook.config import settings
from drivehook.services.pipeline import ChangeNotifier, PipelineOutcome

logger = logging.getLogger(__name__)

router = APIRouter(tags=["drive"])

SYNC_STATE = "sync"
FAILURE_TEXT = "Failed to process change notification"

RESPONSES = {
    PipelineOutcome.SENT: "Message sent to Slack",
    PipelineOutcome.NO_ACTIVITY: "No activities found",
    PipelineOutcome.UNCLASSIFIABLE: "Activity skipped",
}


@lru_cache(maxsize=1)
def get_notifier() -> ChangeNotifier:
    """Process-wide pipeline built from the environment settings."""
    return ChangeNotifier(settings)


def channel_token_ok(expected: str, provided: str | None) -> bool:
    """True when no token is configured or ``provided`` matches it."""
    if not expected:
        return True
    if not provided:
        return False
    return hmac.compare_digest(expected.encode(), provided.encode())


@router.post("/hook", response_class=PlainTextResponse)
async def drive_change_hook(
    notifier: ChangeNotifier = Depends(get_notifier),
    x_goog_resource_state: str | None = Header(None),
    x_goog_channel_id: str | None = Header(None),
    x_goog_channel_token: str | None = Header(None),
    x_goog_message_number: str | None = Header(None),
    x_goog_resource_id: str | None = Header(None),
):
    """
    Google Drive push-notification endpoint.

    ``sync`` pings only confirm a new channel and are acknowledged without any
    API call. Every other state triggers one activity lookup for the configured
    drive and at most one Slack message.
    """
    if not channel_token_ok(notifier.settings.channel_token, x_goog_channel_token):
        return PlainTextResponse("Invalid channel token", status_code=401)

    logger.info(
        "Hook message received: state=%s channel=%s resource=%s message=%s",
        x_goog_resource_state,
        x_goog_channel_id,
        x_goog_resource_id,
        x_goog_message_number,
    )
    if x_goog_resource_state == SYNC_STATE:
        return "Sync event received"

    try:
        result = await notifier.run()
    except Exception:
        logger.exception("Change notification failed")
        return PlainTextResponse(FAILURE_TEXT, status_code=500)
    return RESPONSES[result.outcome]
