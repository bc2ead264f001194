"""Tests for the Drive Activity, People, Slack and Drive v3 clients"""
import datetime as dt
import json

import httpx
import pytest

from drivehook.errors import DispatchFailed, DriveHookError, QueryFailed, ResolveFailed
from drivehook.schemas import NotificationMessage
from drivehook.services import drive as drive_api
from drivehook.services.activity import build_query, query_recent_activity
from drivehook.services.people import resolve_email
from drivehook.services.slack import dispatch

from conftest import SLACK_URL, FakeGoogle, make_activity


def client_for(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_build_query_body():
    now = dt.datetime(2024, 1, 1, 10, 0, tzinfo=dt.timezone.utc)
    body = build_query("0AEX", dt.timedelta(minutes=20), 1, now=now)
    assert body == {
        "ancestorName": "items/0AEX",
        "consolidationStrategy": {"legacy": {}},
        "pageSize": 1,
        "filter": 'time > "2024-01-01T09:40:00.000Z"',
    }


class TestActivityQuery:
    @pytest.mark.asyncio
    async def test_returns_newest_record(self):
        fake = FakeGoogle(activities=[make_activity({"edit": {}}), make_activity({"delete": {}})])
        async with client_for(fake) as client:
            activity = await query_recent_activity(client, "tok", "0AEX")
        assert activity.primary_action_detail.edit == {}
        request = fake.activity_calls[0]
        assert request.method == "POST"
        assert request.url.path == "/v2/activity:query"
        assert request.headers["Authorization"] == "Bearer tok"
        sent = json.loads(request.content)
        assert sent["pageSize"] == 1
        assert sent["filter"].startswith('time > "')

    @pytest.mark.asyncio
    async def test_empty_list_is_none(self):
        fake = FakeGoogle(activities=[])
        async with client_for(fake) as client:
            assert await query_recent_activity(client, "tok", "0AEX") is None

    @pytest.mark.asyncio
    async def test_missing_activities_is_none(self):
        fake = FakeGoogle(activities=None)
        async with client_for(fake) as client:
            assert await query_recent_activity(client, "tok", "0AEX") is None

    @pytest.mark.asyncio
    async def test_http_error_raises_query_failed(self):
        fake = FakeGoogle(activity_status=403)
        async with client_for(fake) as client:
            with pytest.raises(QueryFailed):
                await query_recent_activity(client, "tok", "0AEX")

    @pytest.mark.asyncio
    async def test_transport_error_raises_query_failed(self):
        def handler(request):
            raise httpx.ConnectError("boom", request=request)

        async with client_for(handler) as client:
            with pytest.raises(QueryFailed):
                await query_recent_activity(client, "tok", "0AEX")

    @pytest.mark.asyncio
    async def test_unreadable_body_raises_query_failed(self):
        async with client_for(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(QueryFailed):
                await query_recent_activity(client, "tok", "0AEX")


class TestResolveEmail:
    @pytest.mark.asyncio
    async def test_first_address(self):
        fake = FakeGoogle(emails=[{"value": "a@x.com"}, {"value": "b@x.com"}])
        async with client_for(fake) as client:
            assert await resolve_email(client, "tok", "people/111") == "a@x.com"
        request = fake.people_calls[0]
        assert request.url.path == "/v1/people/111"
        assert request.url.params["personFields"] == "emailAddresses"

    @pytest.mark.asyncio
    async def test_no_addresses_is_empty(self):
        fake = FakeGoogle(emails=[])
        async with client_for(fake) as client:
            assert await resolve_email(client, "tok", "people/111") == ""

    @pytest.mark.asyncio
    async def test_address_without_value_is_empty(self):
        fake = FakeGoogle(emails=[{"metadata": {"primary": True}}])
        async with client_for(fake) as client:
            assert await resolve_email(client, "tok", "people/111") == ""

    @pytest.mark.asyncio
    async def test_addresses_not_a_list_is_empty(self):
        fake = FakeGoogle(emails={"value": "a@x.com"})
        async with client_for(fake) as client:
            assert await resolve_email(client, "tok", "people/111") == ""

    @pytest.mark.asyncio
    async def test_error_raises_resolve_failed(self):
        fake = FakeGoogle(people_status=500)
        async with client_for(fake) as client:
            with pytest.raises(ResolveFailed):
                await resolve_email(client, "tok", "people/111")


class TestDispatch:
    message = NotificationMessage(header="Google Drive Activity", rows=(("message", "hi"),))

    @pytest.mark.asyncio
    async def test_posts_blocks_as_json(self):
        fake = FakeGoogle()
        async with client_for(fake) as client:
            await dispatch(client, SLACK_URL, self.message)
        request = fake.slack_calls[0]
        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == self.message.to_slack_payload()

    @pytest.mark.asyncio
    async def test_rejected_raises_dispatch_failed(self):
        fake = FakeGoogle(slack_status=400)
        async with client_for(fake) as client:
            with pytest.raises(DispatchFailed):
                await dispatch(client, SLACK_URL, self.message)
        assert len(fake.slack_calls) == 1

    @pytest.mark.asyncio
    async def test_missing_url(self):
        fake = FakeGoogle()
        async with client_for(fake) as client:
            with pytest.raises(DispatchFailed):
                await dispatch(client, "", self.message)
        assert fake.calls == []


class TestDriveApi:
    @pytest.mark.asyncio
    async def test_watch_changes_opens_channel(self):
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path.endswith("/changes/startPageToken"):
                return httpx.Response(200, json={"startPageToken": "42"})
            body = json.loads(request.content)
            return httpx.Response(200, json={"kind": "api#channel", "id": body["id"], "resourceId": "r1"})

        async with client_for(handler) as client:
            channel = await drive_api.watch_changes(
                client, "tok", "0AEX", "https://example.test/hook", channel_token="s3cret"
            )
        watch_request = seen[1]
        body = json.loads(watch_request.content)
        assert watch_request.url.params["pageToken"] == "42"
        assert watch_request.url.params["driveId"] == "0AEX"
        assert body["type"] == "web_hook"
        assert body["address"] == "https://example.test/hook"
        assert body["token"] == "s3cret"
        assert channel["id"] == body["id"]

    @pytest.mark.asyncio
    async def test_list_drives(self):
        handler = lambda request: httpx.Response(200, json={"drives": [{"id": "1", "name": "Ops"}]})  # noqa: E731
        async with client_for(handler) as client:
            assert await drive_api.list_drives(client, "tok") == [{"id": "1", "name": "Ops"}]

    @pytest.mark.asyncio
    async def test_error_raises(self):
        async with client_for(lambda request: httpx.Response(404, text="nope")) as client:
            with pytest.raises(DriveHookError):
                await drive_api.stop_channel(client, "tok", "c1", "r1")

    @pytest.mark.asyncio
    async def test_list_files_spans_all_drives(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"files": [{"id": "f1", "name": "a.txt"}]})

        async with client_for(handler) as client:
            found = await drive_api.list_files(client, "tok")
        assert found == [{"id": "f1", "name": "a.txt"}]
        assert seen[0].url.params["supportsAllDrives"] == "true"
        assert seen[0].url.params["includeItemsFromAllDrives"] == "true"

    @pytest.mark.asyncio
    async def test_parent_tree_stops_on_cycle(self):
        files = {
            "a": {"id": "a", "name": "A", "parents": ["b"]},
            "b": {"id": "b", "name": "B", "parents": ["a"]},
        }
        handler = lambda request: httpx.Response(200, json=files[request.url.path.rsplit("/", 1)[-1]])  # noqa: E731
        async with client_for(handler) as client:
            tree = await drive_api.parent_tree(client, "tok", "a")
        assert [(depth, item["id"]) for depth, item in tree] == [(1, "b")]

    @pytest.mark.asyncio
    async def test_watch_file_channel(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"kind": "api#channel"})

        async with client_for(handler) as client:
            await drive_api.watch_file(client, "tok", "doc1", "https://example.test/hook", expiration_hours=24)
        body = json.loads(seen[0].content)
        assert seen[0].url.path == "/drive/v3/files/doc1/watch"
        assert body["type"] == "web_hook"
        assert "token" not in body
        assert body["expiration"] > 0

    @pytest.mark.asyncio
    async def test_list_changes_uses_page_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"changes": []})

        async with client_for(handler) as client:
            await drive_api.list_changes(client, "tok", "0AEX", "77")
        params = seen[0].url.params
        assert params["pageToken"] == "77"
        assert params["driveId"] == "0AEX"
        assert params["includeItemsFromAllDrives"] == "true"
