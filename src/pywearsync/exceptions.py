"""Custom exception hierarchy for pywearsync."""

from __future__ import annotations


class WearSyncError(Exception):
    """Base exception for all pywearsync errors."""


class WearSyncConfigError(WearSyncError):
    """Invalid or missing configuration."""


class ChannelConnectError(WearSyncError):
    """The remote state channel could not be reached within the timeout."""

    def __init__(self, message: str, *, timeout: float | None = None) -> None:
        self.timeout = timeout
        super().__init__(message)


class MalformedEventError(WearSyncError):
    """A sync event on an accepted topic is missing a field or has a bad type."""

    def __init__(self, message: str, *, topic_path: str = "") -> None:
        self.topic_path = topic_path
        super().__init__(message)


class DisplayLifecycleError(WearSyncError, RuntimeError):
    """A display callback was delivered outside the created..destroyed window.

    This is a programming error in the host, never caught by the library.
    """
