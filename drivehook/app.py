"""the beautiful world start from here."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from drivehook.config import settings
from drivehook.routers import drive, info

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Google Drive → Slack activity notifier")

app.include_router(info.router)
app.include_router(drive.router)
