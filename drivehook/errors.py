"""Failure types raised by the notification pipeline."""

from __future__ import annotations


class DriveHookError(RuntimeError):
    """Base class for every pipeline failure."""


class CredentialsError(DriveHookError):
    """Raised when the Google credential cannot be loaded or refreshed."""


class QueryFailed(DriveHookError):
    """Raised when the activity log cannot be queried."""


class ResolveFailed(DriveHookError):
    """Raised when an actor's person record cannot be fetched."""


class DispatchFailed(DriveHookError):
    """Raised when Slack does not accept a notification."""
