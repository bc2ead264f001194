"""Change-notification pipeline: activity query -> actor -> summary -> Slack."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import httpx

from drivehook.config import Settings
from drivehook.errors import QueryFailed, ResolveFailed
from drivehook.schemas import ChangeActivity, NotificationMessage
from drivehook.services.actions import ActionKind, action_detail, classify, format_message
from drivehook.services.activity import query_recent_activity
from drivehook.services.google_auth import access_token, load_credentials
from drivehook.services.people import resolve_email
from drivehook.services.slack import dispatch
from drivehook.timezone import load_timezone

logger = logging.getLogger(__name__)


class PipelineOutcome(str, Enum):
    SENT = "sent"
    NO_ACTIVITY = "no_activity"
    UNCLASSIFIABLE = "unclassifiable"


@dataclass
class PipelineResult:
    outcome: PipelineOutcome
    kind: ActionKind = ActionKind.UNKNOWN
    message: Optional[NotificationMessage] = None


class ChangeNotifier:
    """
    Runs one change ping through the pipeline.

    Everything the pipeline needs comes from ``settings`` at construction time.
    The Google credential is loaded on first use and shared read-only across
    requests; each run opens its own HTTP client.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        credentials: Any = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.tz, self.tz_name = load_timezone(settings.timezone)
        self.lookback = dt.timedelta(minutes=settings.lookback_minutes)
        self._credentials = credentials
        self._transport = transport

    @property
    def credentials(self) -> Any:
        if self._credentials is None:
            self._credentials = load_credentials(self.settings.token_path)
        return self._credentials

    async def bearer_token(self) -> str:
        return await access_token(self.credentials)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.http_timeout_seconds,
            transport=self._transport,
        )

    async def latest_activity(self, client: httpx.AsyncClient, token: str) -> Optional[ChangeActivity]:
        if not self.settings.drive_id:
            raise QueryFailed("DRIVE_ID is not configured")
        return await query_recent_activity(
            client,
            token,
            self.settings.drive_id,
            self.lookback,
            self.settings.page_size,
        )

    async def actor_email(
        self, client: httpx.AsyncClient, token: str, activity: ChangeActivity
    ) -> str:
        """
        Email of the acting user, ``""`` for system or anonymous actors.

        A failed lookup degrades to ``""`` unless ABORT_ON_RESOLVE_FAILURE is set.
        """
        actor = activity.actor
        person_name = actor.person_name if actor else None
        if not person_name:
            return ""
        try:
            return await resolve_email(client, token, person_name)
        except ResolveFailed:
            if self.settings.abort_on_resolve_failure:
                raise
            logger.warning("Could not resolve %s; sending without actor", person_name, exc_info=True)
            return ""

    async def run(self) -> PipelineResult:
        token = await self.bearer_token()
        async with self.http_client() as client:
            activity = await self.latest_activity(client, token)
            if activity is None:
                logger.info("No activities found")
                return PipelineResult(PipelineOutcome.NO_ACTIVITY)

            kind = classify(activity)
            if kind is ActionKind.UNKNOWN:
                logger.info("Activity could not be classified; skipping")
                return PipelineResult(PipelineOutcome.UNCLASSIFIABLE)

            email = await self.actor_email(client, token, activity)
            message = format_message(
                kind,
                action_detail(activity, kind),
                activity.target,
                email,
                activity.occurred_at,
                tz=self.tz,
                header=self.settings.slack_header,
            )
            await dispatch(client, self.settings.slack_webhook_url, message)

        logger.info("Message sent to Slack (%s)", kind.value)
        return PipelineResult(PipelineOutcome.SENT, kind=kind, message=message)
