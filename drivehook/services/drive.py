"""Drive API v3 calls used for channel setup and diagnostics."""

from __future__ import annotations

import time
import uuid
from typing import Any, Optional

import httpx

from drivehook.errors import DriveHookError
from drivehook.services.google_auth import auth_headers

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"

JSONDict = dict[str, Any]


async def _call(
    client: httpx.AsyncClient,
    token: str,
    method: str,
    path: str,
    *,
    params: Optional[JSONDict] = None,
    json: Optional[JSONDict] = None,
) -> JSONDict:
    try:
        resp = await client.request(
            method,
            f"{DRIVE_API_BASE}{path}",
            params=params,
            json=json,
            headers=auth_headers(token),
        )
    except httpx.HTTPError as exc:
        raise DriveHookError(f"Drive request failed: {exc}") from exc
    if resp.status_code >= 300:
        raise DriveHookError(f"Drive error: {resp.status_code} {resp.text}")
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError as exc:
        raise DriveHookError(f"Drive returned an unreadable body: {exc}") from exc


def _channel_body(hook_url: str, channel_token: str, expiration_hours: float) -> JSONDict:
    body: JSONDict = {
        "id": str(uuid.uuid4()),
        "type": "web_hook",
        "address": hook_url,
        "expiration": int((time.time() + expiration_hours * 3600) * 1000),
    }
    if channel_token:
        body["token"] = channel_token
    return body


async def list_drives(client: httpx.AsyncClient, token: str, page_size: int = 100) -> list[JSONDict]:
    """Shared drives visible to the credential (first page)."""
    data = await _call(
        client,
        token,
        "GET",
        "/drives",
        params={"pageSize": page_size, "fields": "nextPageToken, drives(id, name)"},
    )
    return list(data.get("drives") or [])


async def get_start_page_token(client: httpx.AsyncClient, token: str, drive_id: str) -> str:
    data = await _call(
        client,
        token,
        "GET",
        "/changes/startPageToken",
        params={"driveId": drive_id, "supportsAllDrives": "true"},
    )
    page_token = data.get("startPageToken")
    if not page_token:
        raise DriveHookError("Drive did not return a start page token")
    return str(page_token)


async def watch_changes(
    client: httpx.AsyncClient,
    token: str,
    drive_id: str,
    hook_url: str,
    *,
    channel_token: str = "",
    expiration_hours: float = 24,
) -> JSONDict:
    """
    Open a ``web_hook`` channel that pings ``hook_url`` on every change in the
    drive. The returned channel carries the ``id`` and ``resourceId`` needed to
    stop it.
    """
    page_token = await get_start_page_token(client, token, drive_id)
    body = _channel_body(hook_url, channel_token, expiration_hours)
    return await _call(
        client,
        token,
        "POST",
        "/changes/watch",
        params={
            "driveId": drive_id,
            "pageToken": page_token,
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        },
        json=body,
    )


async def stop_channel(
    client: httpx.AsyncClient, token: str, channel_id: str, resource_id: str
) -> None:
    await _call(
        client,
        token,
        "POST",
        "/channels/stop",
        json={"id": channel_id, "resourceId": resource_id},
    )


async def list_files(client: httpx.AsyncClient, token: str, page_size: int = 100) -> list[JSONDict]:
    """Files visible to the credential across all drives (first page, by name)."""
    data = await _call(
        client,
        token,
        "GET",
        "/files",
        params={
            "pageSize": page_size,
            "fields": "nextPageToken, files(id, name, mimeType, fileExtension, kind, size)",
            "orderBy": "name asc",
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        },
    )
    return list(data.get("files") or [])


async def get_file(
    client: httpx.AsyncClient, token: str, file_id: str, fields: str = "id, name, mimeType, parents"
) -> JSONDict:
    return await _call(
        client,
        token,
        "GET",
        f"/files/{file_id}",
        params={"fields": fields, "supportsAllDrives": "true"},
    )


async def parent_tree(
    client: httpx.AsyncClient, token: str, file_id: str, max_depth: int = 32
) -> list[tuple[int, JSONDict]]:
    """
    Walk ``parents`` upwards from ``file_id``.

    Returns ``(depth, file)`` pairs in visiting order, depth 1 being the direct
    parents. The starting file itself is not included.
    """
    found: list[tuple[int, JSONDict]] = []
    seen = {file_id}

    async def walk(current: str, depth: int) -> None:
        if depth > max_depth:
            return
        item = await get_file(client, token, current)
        for parent_id in item.get("parents") or []:
            if parent_id in seen:
                continue
            seen.add(parent_id)
            parent = await get_file(client, token, parent_id)
            found.append((depth, parent))
            if parent.get("parents"):
                await walk(parent_id, depth + 1)

    await walk(file_id, 1)
    return found


async def watch_file(
    client: httpx.AsyncClient,
    token: str,
    file_id: str,
    hook_url: str,
    *,
    channel_token: str = "",
    expiration_hours: float = 24,
) -> JSONDict:
    """Open a ``web_hook`` channel on a single file."""
    body = _channel_body(hook_url, channel_token, expiration_hours)
    return await _call(
        client,
        token,
        "POST",
        f"/files/{file_id}/watch",
        params={"supportsAllDrives": "true"},
        json=body,
    )


async def list_changes(
    client: httpx.AsyncClient, token: str, drive_id: str, page_token: str
) -> JSONDict:
    """One page of ``changes.list`` for the drive, starting at ``page_token``."""
    return await _call(
        client,
        token,
        "GET",
        "/changes",
        params={
            "driveId": drive_id,
            "pageToken": page_token,
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        },
    )
