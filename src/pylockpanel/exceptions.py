"""Custom exception hierarchy for pylockpanel."""

from __future__ import annotations


class LockPanelError(Exception):
    """Base exception for all pylockpanel errors."""


class LockPanelConfigError(LockPanelError):
    """Invalid or missing configuration."""


class LockPanelTransportError(LockPanelError):
    """HTTP-level failure (network, non-2xx, invalid JSON, malformed body)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
