"""Drive Activity API schemas"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from drivehook.timezone import parse_rfc3339


class ApiModel(BaseModel):
    """
    Base for Google API payloads.
    Only fields used by this app are declared; everything else is kept as extra.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class KnownUser(ApiModel):
    person_name: Optional[str] = Field(None, alias="personName")
    is_current_user: bool = Field(False, alias="isCurrentUser")


class ActorUser(ApiModel):
    known_user: Optional[KnownUser] = Field(None, alias="knownUser")


class Actor(ApiModel):
    user: Optional[ActorUser] = None

    @property
    def person_name(self) -> Optional[str]:
        """People API resource name (``people/...``) for known users, else None."""
        if self.user is None or self.user.known_user is None:
            return None
        return self.user.known_user.person_name or None


class DriveRef(ApiModel):
    name: str = ""
    title: str = ""


class Owner(ApiModel):
    drive: Optional[DriveRef] = None
    team_drive: Optional[DriveRef] = Field(None, alias="teamDrive")

    @property
    def shared_drive(self) -> Optional[DriveRef]:
        return self.drive or self.team_drive


class DriveItem(ApiModel):
    name: str = ""
    title: str = ""
    mime_type: str = Field("", alias="mimeType")
    owner: Optional[Owner] = None


class FileComment(ApiModel):
    parent: Optional[DriveItem] = None


@dataclass(frozen=True)
class TargetInfo:
    """What a notification says about the changed resource."""

    title: str = ""
    drive_title: str = ""
    is_shared_drive: bool = False


class Target(ApiModel):
    drive_item: Optional[DriveItem] = Field(None, alias="driveItem")
    drive: Optional[DriveRef] = None
    team_drive: Optional[DriveRef] = Field(None, alias="teamDrive")
    file_comment: Optional[FileComment] = Field(None, alias="fileComment")

    def info(self) -> TargetInfo:
        item = self.drive_item
        if item is None and self.file_comment is not None:
            item = self.file_comment.parent
        if item is not None:
            shared = item.owner.shared_drive if item.owner else None
            return TargetInfo(
                title=item.title,
                drive_title=shared.title if shared else "",
                is_shared_drive=bool(shared and (shared.name or shared.title)),
            )
        drive = self.drive or self.team_drive
        if drive is not None:
            return TargetInfo(
                title=drive.title, drive_title=drive.title, is_shared_drive=True
            )
        return TargetInfo()


class TargetReference(ApiModel):
    """A parent in a move; bare ``title`` is accepted alongside the API shapes."""

    title: str = ""
    drive_item: Optional[DriveItem] = Field(None, alias="driveItem")
    drive: Optional[DriveRef] = None
    team_drive: Optional[DriveRef] = Field(None, alias="teamDrive")

    @property
    def display_title(self) -> str:
        for candidate in (self.drive_item, self.drive, self.team_drive):
            if candidate is not None and candidate.title:
                return candidate.title
        return self.title


class RenameDetail(ApiModel):
    old_title: str = Field("", alias="oldTitle")
    new_title: str = Field("", alias="newTitle")


class MoveDetail(ApiModel):
    added_parents: Optional[list[TargetReference]] = Field(None, alias="addedParents")
    removed_parents: Optional[list[TargetReference]] = Field(
        None, alias="removedParents"
    )


class ActionDetail(ApiModel):
    """
    ``primaryActionDetail``: the API populates exactly one of these fields.

    A field counts as populated when present and not null, so ``{"edit": {}}``
    is an edit.
    """

    rename: Optional[RenameDetail] = None
    move: Optional[MoveDetail] = None
    delete: Optional[dict[str, Any]] = None
    restore: Optional[dict[str, Any]] = None
    create: Optional[dict[str, Any]] = None
    edit: Optional[dict[str, Any]] = None
    comment: Optional[dict[str, Any]] = None
    permission_change: Optional[dict[str, Any]] = Field(None, alias="permissionChange")
    settings_change: Optional[dict[str, Any]] = Field(None, alias="settingsChange")
    reference: Optional[dict[str, Any]] = None


class TimeRange(ApiModel):
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")


class ChangeActivity(ApiModel):
    """One ``DriveActivity`` record."""

    timestamp: Optional[str] = None
    time_range: Optional[TimeRange] = Field(None, alias="timeRange")
    actors: list[Actor] = Field(default_factory=list)
    targets: list[Target] = Field(default_factory=list)
    primary_action_detail: ActionDetail = Field(
        default_factory=ActionDetail, alias="primaryActionDetail"
    )

    @property
    def occurred_at(self) -> Optional[dt.datetime]:
        raw = self.timestamp
        if not raw and self.time_range is not None:
            raw = self.time_range.end_time
        return parse_rfc3339(raw) if raw else None

    @property
    def actor(self) -> Optional[Actor]:
        return self.actors[0] if self.actors else None

    @property
    def target(self) -> TargetInfo:
        return self.targets[0].info() if self.targets else TargetInfo()


class ActivityQueryResponse(ApiModel):
    activities: list[ChangeActivity] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")


@dataclass(frozen=True)
class NotificationMessage:
    """
    The dispatch unit: a header and ordered ``(label, value)`` rows.
    Rendered for Slack as header, divider and one mrkdwn section.
    """

    header: str
    rows: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def text(self) -> str:
        return "\n".join(f"{label}:\t*{value}*" for label, value in self.rows)

    def row(self, label: str) -> Optional[str]:
        for key, value in self.rows:
            if key == label:
                return value
        return None

    def to_slack_payload(self) -> dict[str, Any]:
        return {
            "blocks": [
                {
                    "type": "header",
                    "text": {"type": "plain_text", "text": self.header},
                },
                {"type": "divider"},
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": self.text},
                },
            ]
        }
