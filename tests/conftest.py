"""Pytest configuration and fixtures."""
import dataclasses
import json
import os
from types import SimpleNamespace

import httpx
import pytest

# Set test environment variables before drivehook reads them
os.environ.setdefault("TIMEZONE", "UTC")
os.environ.setdefault("LOG_LEVEL", "ERROR")
os.environ.setdefault("CHANNEL_TOKEN", "")

from drivehook.config import Settings  # noqa: E402

SLACK_URL = "https://hooks.slack.com/services/T000/B000/XXXX"
DRIVE_ID = "0AEX39ZBwT0_test"


def make_activity(action: dict, **overrides) -> dict:
    """A DriveActivity record as returned by activity:query."""
    record = {
        "primaryActionDetail": action,
        "actors": [{"user": {"knownUser": {"personName": "people/111"}}}],
        "targets": [
            {
                "driveItem": {
                    "name": "items/abc",
                    "title": "Final",
                    "owner": {"drive": {"name": "drives/0AEX", "title": "Team Drive"}},
                }
            }
        ],
        "timestamp": "2024-01-01T10:00:00Z",
    }
    record.update(overrides)
    return record


class FakeGoogle:
    """
    httpx.MockTransport handler standing in for Drive Activity, People and Slack.
    Every request is recorded in ``calls``.
    """

    def __init__(
        self,
        activities=None,
        emails=None,
        *,
        activity_status=200,
        people_status=200,
        slack_status=200,
    ):
        self.activities = activities
        self.emails = emails if emails is not None else [{"value": "a@x.com"}]
        self.activity_status = activity_status
        self.people_status = people_status
        self.slack_status = slack_status
        self.calls = []

    def hits(self, host):
        return [req for req in self.calls if req.url.host == host]

    @property
    def activity_calls(self):
        return self.hits("driveactivity.googleapis.com")

    @property
    def people_calls(self):
        return self.hits("people.googleapis.com")

    @property
    def slack_calls(self):
        return self.hits("hooks.slack.com")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        host = request.url.host
        if host == "driveactivity.googleapis.com":
            if self.activity_status != 200:
                return httpx.Response(self.activity_status, json={"error": {"code": self.activity_status}})
            body = {} if self.activities is None else {"activities": self.activities}
            return httpx.Response(200, json=body)
        if host == "people.googleapis.com":
            if self.people_status != 200:
                return httpx.Response(self.people_status, json={"error": {"code": self.people_status}})
            body = {"resourceName": request.url.path.split("/v1/", 1)[-1]}
            if self.emails:
                body["emailAddresses"] = self.emails
            return httpx.Response(200, json=body)
        if host == "hooks.slack.com":
            if self.slack_status != 200:
                return httpx.Response(self.slack_status, text="invalid_payload")
            return httpx.Response(200, text="ok")
        return httpx.Response(404)

    def slack_payload(self, index=0):
        return json.loads(self.slack_calls[index].content)


@pytest.fixture
def fake_credentials():
    """Stands in for google.oauth2 Credentials that are already valid."""
    return SimpleNamespace(valid=True, token="test-token")


@pytest.fixture
def test_settings():
    return dataclasses.replace(
        Settings(),
        slack_webhook_url=SLACK_URL,
        drive_id=DRIVE_ID,
        lookback_minutes=20,
        page_size=1,
        timezone="UTC",
        channel_token="",
        abort_on_resolve_failure=False,
        slack_header="Google Drive Activity",
    )
