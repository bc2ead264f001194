"""Classification and Slack summaries for Drive activity records."""

from __future__ import annotations

import datetime as dt
import logging
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from drivehook.schemas import (
    ActionDetail,
    ChangeActivity,
    MoveDetail,
    NotificationMessage,
    RenameDetail,
    TargetInfo,
    TargetReference,
)
from drivehook.timezone import TZ, format_display_time

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
DEFAULT_HEADER = "Google Drive Activity"


class ActionKind(str, Enum):
    RENAME = "rename"
    MOVE = "move"
    DELETE = "delete"
    RESTORE = "restore"
    CREATE = "create"
    EDIT = "edit"
    COMMENT = "comment"
    PERMISSION_CHANGE = "permissionChange"
    SETTINGS_CHANGE = "settingsChange"
    REFERENCE = "reference"
    UNKNOWN = "unknown"


# ActionDetail attribute holding each kind's payload.
DETAIL_FIELDS: dict[ActionKind, str] = {
    ActionKind.RENAME: "rename",
    ActionKind.MOVE: "move",
    ActionKind.DELETE: "delete",
    ActionKind.RESTORE: "restore",
    ActionKind.CREATE: "create",
    ActionKind.EDIT: "edit",
    ActionKind.COMMENT: "comment",
    ActionKind.PERMISSION_CHANGE: "permission_change",
    ActionKind.SETTINGS_CHANGE: "settings_change",
    ActionKind.REFERENCE: "reference",
}

Template = Callable[[str, str, Any, str], str]


def _first_title(parents: Optional[Sequence[TargetReference]]) -> str:
    if not parents:
        return UNKNOWN
    return parents[0].display_title or UNKNOWN


def _simple(verb: str) -> Template:
    def template(actor: str, target: str, _detail: Any, time: str) -> str:
        return f"{actor} {verb} {target} at {time}"

    return template


def _rename(actor: str, target: str, detail: Any, time: str) -> str:
    old_title = detail.old_title if isinstance(detail, RenameDetail) else ""
    return f"{actor} renamed {target} from {old_title or UNKNOWN} at {time}"


def _move(actor: str, target: str, detail: Any, time: str) -> str:
    removed = detail.removed_parents if isinstance(detail, MoveDetail) else None
    added = detail.added_parents if isinstance(detail, MoveDetail) else None
    return (
        f"{actor} moved {target} from {_first_title(removed)} "
        f"to {_first_title(added)} at {time}"
    )


TEMPLATES: dict[ActionKind, Template] = {
    ActionKind.RENAME: _rename,
    ActionKind.MOVE: _move,
    ActionKind.DELETE: _simple("deleted"),
    ActionKind.RESTORE: _simple("restored"),
    ActionKind.CREATE: _simple("created"),
    ActionKind.EDIT: _simple("edited"),
    ActionKind.COMMENT: _simple("commented on"),
    ActionKind.PERMISSION_CHANGE: _simple("changed permissions for"),
    ActionKind.SETTINGS_CHANGE: _simple("changed settings for"),
    ActionKind.REFERENCE: _simple("referenced"),
}


def populated_kinds(detail: ActionDetail) -> list[ActionKind]:
    """Every action kind whose field is present (``{}`` included) in ``detail``."""
    return [
        kind
        for kind, attr in DETAIL_FIELDS.items()
        if getattr(detail, attr, None) is not None
    ]


def classify(activity: ChangeActivity) -> ActionKind:
    """
    Return the single action kind carried by ``activity``.

    Records with no recognised action, or with more than one, are ``UNKNOWN``.
    """
    kinds = populated_kinds(activity.primary_action_detail)
    if len(kinds) != 1:
        if kinds:
            logger.warning(
                "Activity carries %d action fields (%s); treating as unknown",
                len(kinds),
                ", ".join(kind.value for kind in kinds),
            )
        return ActionKind.UNKNOWN
    return kinds[0]


def action_detail(activity: ChangeActivity, kind: ActionKind) -> Any:
    attr = DETAIL_FIELDS.get(kind)
    if attr is None:
        return None
    return getattr(activity.primary_action_detail, attr, None)


def format_message(
    kind: ActionKind,
    detail: Any,
    target: TargetInfo,
    actor_email: str,
    timestamp: Optional[dt.datetime],
    *,
    tz: dt.tzinfo = TZ,
    header: str = DEFAULT_HEADER,
) -> NotificationMessage:
    """
    Build the Slack message for one classified activity.

    ``actor_email`` may be empty; it is rendered as-is. A missing timestamp,
    target title or drive title renders as ``Unknown``.
    """
    template = TEMPLATES.get(kind)
    if template is None:
        raise ValueError(f"No message template for action kind {kind.value!r}")
    time = format_display_time(timestamp, tz) if timestamp else UNKNOWN
    message = template(actor_email or "", target.title or UNKNOWN, detail, time)
    return NotificationMessage(
        header=header,
        rows=(
            ("drive", target.drive_title or UNKNOWN),
            ("isSharedDrive", "Yes" if target.is_shared_drive else "No"),
            ("message", message),
        ),
    )
