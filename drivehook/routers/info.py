"""Router for health and help pages"""

from __future__ import annotations

from textwrap import dedent

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from drivehook.config import settings
from drivehook.services.google_auth import SCOPES
from drivehook.timezone import TZ_NAME

router = APIRouter()

HTTP_HELP_TEXT = dedent(
    f"""
Google Drive → Slack Notifier (HTTP Help)

Endpoints
---------
- GET  /      : Health check
- GET  /help  : Endpoint & configuration summary
- GET  /setup : End-to-end setup guide
- POST /hook  : Google Drive push notification (changes.watch channel)

Notes
-----
- PUBLIC_BASE_URL: {settings.public_base_url}
- Activity window: {settings.lookback_minutes} minutes, page size {settings.page_size}
- Times are rendered in {TZ_NAME}.
"""
).strip()


def render_setup_text() -> str:
    """
    Seeeeeeetup
    """
    base = settings.public_base_url.rstrip("/")
    scopes = "\n    ".join(SCOPES)
    return dedent(
        f"""
    Setup Guide (Server & Watch Channel)

    1) ENV (.env)
    -------------
    SLACK_WEBHOOK_URL=https://hooks.slack.com/services/...
    DRIVE_ID=0AAbCdEf...
    PUBLIC_BASE_URL={base}
    TOKEN_PATH=assets/auth/token.json
    CHANNEL_TOKEN=some-random-string
    TIMEZONE=UTC

    2) Credentials
    --------------
    Place an authorized_user token.json (client_id, client_secret,
    refresh_token) at TOKEN_PATH. It needs these scopes:
    {scopes}

    3) venv & deps
    --------------
    python -m venv .venv
    source .venv/bin/activate
    pip install -U pip
    pip install -e .

    4) Run
    ------
    uvicorn drivehook.app:app --host 127.0.0.1 --port 8000 --proxy-headers --forwarded-allow-ips="*"

    5) Watch channel
    ----------------
    drivehook watch <DRIVE_ID> {base}/hook
    Channels expire; re-run before the expiration printed by the command.
    """
    ).strip()


@router.get("/", response_class=PlainTextResponse)
def root():
    """Health check."""
    return "ok"


@router.get("/help", response_class=PlainTextResponse)
def http_help():
    """
    Plain-text help for HTTP clients.
    """
    return HTTP_HELP_TEXT


@router.get("/setup", response_class=PlainTextResponse)
def http_setup():
    """
    Plain-text setup guide.
    """
    return render_setup_text()
