"""Session events.

Every input the panel reacts to (load, remote call resolutions, user
actions, timer expiries) is expressed as one of these events. Only
:mod:`pylockpanel.state.transitions` turns them into state.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pylockpanel.models.session import CommandKind


class SessionEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class Mounted(SessionEvent):
    """The panel loaded with the identifier found in local storage."""

    user_id: str | None


# --- identity --------------------------------------------------------------


class IdentityResolved(SessionEvent):
    display_name: str


class IdentityUnregistered(SessionEvent):
    pass


class IdentityLookupFailed(SessionEvent):
    detail: str


# --- status refresh --------------------------------------------------------


class StatusRefreshed(SessionEvent):
    locked: bool


class StatusRefreshFailed(SessionEvent):
    """A status read failed.

    ``detail`` is the transport failure text, or ``None`` when the service
    answered ``success: false``.
    """

    detail: str | None = None


# --- open / close ----------------------------------------------------------


class CommandIssued(SessionEvent):
    command: CommandKind


class CommandSucceeded(SessionEvent):
    command: CommandKind


class CommandFailed(SessionEvent):
    """``detail`` is ``None`` for a logical failure (``success: false``)."""

    command: CommandKind
    detail: str | None = None


# --- rename ----------------------------------------------------------------


class RenameRequested(SessionEvent):
    name: str


class RenameSucceeded(SessionEvent):
    pass


class RenameFailed(SessionEvent):
    detail: str | None = None


# --- timers ----------------------------------------------------------------


class MessageExpired(SessionEvent):
    """The expiry timer of message number ``seq`` fired."""

    seq: int
