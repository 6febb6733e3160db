"""Typed responses of the lock service endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import StrictBool, field_validator, model_validator

from pylockpanel.models._base import LockPanelBaseModel


class AckResponse(LockPanelBaseModel):
    """Acknowledgement returned by the write endpoints (set name, open, close)."""

    success: StrictBool


class GetNameResponse(LockPanelBaseModel):
    """Response of the name lookup.

    ``name`` is ``None`` when the identifier is unknown to the name store.
    """

    success: StrictBool
    name: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> Any:
        # Anything but a string means "no name recorded".
        return value if isinstance(value, str) else None


class StatusResponse(LockPanelBaseModel):
    """Response of the lock status read."""

    success: StrictBool
    locked: StrictBool | None = None

    @model_validator(mode="after")
    def _locked_required_on_success(self) -> StatusResponse:
        if self.success and self.locked is None:
            raise ValueError("successful status response must carry 'locked'")
        return self
