"""People API lookups."""

from __future__ import annotations

import logging

import httpx

from drivehook.errors import ResolveFailed
from drivehook.services.google_auth import auth_headers

logger = logging.getLogger(__name__)

PEOPLE_API_BASE = "https://people.googleapis.com/v1"


async def resolve_email(client: httpx.AsyncClient, token: str, person_name: str) -> str:
    """
    Primary email for a People API resource name such as ``people/123``.

    Returns ``""`` when the person has no email addresses on record.
    """
    url = f"{PEOPLE_API_BASE}/{person_name}"
    try:
        resp = await client.get(
            url,
            params={"personFields": "emailAddresses"},
            headers=auth_headers(token),
        )
    except httpx.HTTPError as exc:
        raise ResolveFailed(f"People request failed: {exc}") from exc
    if resp.status_code >= 300:
        raise ResolveFailed(f"People error: {resp.status_code} {resp.text}")
    try:
        data = resp.json()
    except ValueError as exc:
        raise ResolveFailed(f"People returned an unreadable body: {exc}") from exc

    addresses = data.get("emailAddresses") if isinstance(data, dict) else None
    if not addresses or not isinstance(addresses, list):
        logger.info("No email addresses found for %s", person_name)
        return ""
    first = addresses[0] if isinstance(addresses[0], dict) else {}
    return str(first.get("value") or "")
