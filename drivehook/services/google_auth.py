"""Google credential helpers."""

from __future__ import annotations

import logging
from pathlib import Path

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2.credentials import Credentials
from starlette.concurrency import run_in_threadpool

from drivehook.errors import CredentialsError

logger = logging.getLogger(__name__)

SCOPES = (
    "https://www.googleapis.com/auth/drive.readonly",
    "https://www.googleapis.com/auth/drive.activity.readonly",
    "https://www.googleapis.com/auth/contacts.other.readonly",
    "https://www.googleapis.com/auth/directory.readonly",
    "https://www.googleapis.com/auth/userinfo.email",
)


def load_credentials(token_path: str | Path) -> Credentials:
    """
    Load an ``authorized_user`` token.json (client_id, client_secret,
    refresh_token) written by a previous OAuth consent flow.
    """
    path = Path(token_path)
    try:
        creds = Credentials.from_authorized_user_file(str(path))
    except FileNotFoundError as exc:
        raise CredentialsError(f"No credentials found at {path}") from exc
    except (OSError, ValueError) as exc:
        raise CredentialsError(f"Unreadable credentials at {path}: {exc}") from exc
    logger.info("Loaded Google credentials from %s", path)
    return creds


async def access_token(creds: Credentials) -> str:
    """Bearer token for ``creds``, refreshed in a worker thread when expired."""
    if not creds.valid:
        try:
            await run_in_threadpool(creds.refresh, GoogleAuthRequest())
        except GoogleAuthError as exc:
            raise CredentialsError(f"Credential refresh failed: {exc}") from exc
        logger.debug("Refreshed Google access token")
    if not creds.token:
        raise CredentialsError("Credential has no access token")
    return creds.token


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
