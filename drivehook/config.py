"""the beautiful world start from here."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """App Settings"""

    slack_webhook_url: str = os.getenv("SLACK_WEBHOOK_URL", "")
    drive_id: str = os.getenv("DRIVE_ID", "")
    lookback_minutes: int = int(os.getenv("LOOKBACK_MINUTES", "20"))
    page_size: int = int(os.getenv("PAGE_SIZE", "1"))
    timezone: str = os.getenv("TIMEZONE", "UTC")
    token_path: str = os.getenv("TOKEN_PATH", "assets/auth/token.json")
    channel_token: str = os.getenv("CHANNEL_TOKEN", "")
    abort_on_resolve_failure: bool = _env_flag("ABORT_ON_RESOLVE_FAILURE")
    slack_header: str = os.getenv("SLACK_HEADER", "Google Drive Activity")
    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "https://yourdomain.exe")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
