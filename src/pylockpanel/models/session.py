"""In-memory session models: identity, lock belief and the panel state."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LockBelief(enum.StrEnum):
    """The client's current understanding of the physical lock."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"
    UNKNOWN = "unknown"

    @classmethod
    def from_locked(cls, locked: bool) -> LockBelief:
        return cls.LOCKED if locked else cls.UNLOCKED


class CommandKind(enum.StrEnum):
    """User-initiated lock commands."""

    OPEN = "open"
    CLOSE = "close"

    @property
    def resulting_belief(self) -> LockBelief:
        """Lock belief after the actuator confirmed this command."""
        return LockBelief.UNLOCKED if self is CommandKind.OPEN else LockBelief.LOCKED


class Identity(BaseModel):
    """Who is using the panel.

    ``user_id`` never changes for a session; ``display_name`` stays ``None``
    until the name lookup resolved.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: str | None = None
    display_name: str | None = None

    @property
    def is_registered(self) -> bool:
        return self.user_id is not None and self.display_name is not None


class TransientMessage(BaseModel):
    """Short-lived user notification.

    ``seq`` increases with every message set in a session so that an expiry
    scheduled for an older message cannot clear a newer one.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str
    expires_at: datetime
    seq: int


class SessionState(BaseModel):
    """Everything one panel view knows.

    Instances are immutable; :func:`pylockpanel.state.transitions.apply_event`
    produces the successor state.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    identity: Identity = Identity()
    lock: LockBelief = LockBelief.UNKNOWN
    pending_command: CommandKind | None = None
    message: TransientMessage | None = None
    message_seq: int = 0
    error: str | None = None
    fatal_error: str | None = None
    status_failures: int = 0

    @property
    def command_in_flight(self) -> bool:
        return self.pending_command is not None

    @property
    def is_fatal(self) -> bool:
        return self.fatal_error is not None
