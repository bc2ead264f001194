"""Timezone helpers."""

from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from drivehook.config import settings

DEFAULT_TIMEZONE = "UTC"
DISPLAY_FORMAT = "%H:%M:%S on %d-%b-%Y"


def load_timezone(name: str, fallback: str = DEFAULT_TIMEZONE) -> tuple[ZoneInfo, str]:
    """Return a ``ZoneInfo`` instance and its canonical name with a fallback."""

    try:
        return ZoneInfo(name), name
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(fallback), fallback


TZ, TZ_NAME = load_timezone(settings.timezone or DEFAULT_TIMEZONE)


def parse_rfc3339(value: str) -> dt.datetime:
    """
    Parse an RFC 3339 timestamp as returned by Google APIs.

    Fractional seconds may carry up to nine digits and the zone may be ``Z``;
    naive values are taken as UTC.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    if "." in text:
        head, _, rest = text.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits += rest[0]
            rest = rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    parsed = dt.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def format_display_time(moment: dt.datetime, tz: dt.tzinfo = TZ) -> str:
    """Render ``moment`` as ``HH:MM:SS on DD-Mon-YYYY`` in ``tz``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.timezone.utc)
    return moment.astimezone(tz).strftime(DISPLAY_FORMAT)
