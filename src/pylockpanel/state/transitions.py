"""Pure session transitions.

``apply_event(state, event, policy) -> state`` is the only way the panel
state changes. It performs no I/O and reads no clock; timestamps come from
the events themselves, which keeps every transition reproducible in tests.

Policy summary:
- The lock belief only changes on a status read or a confirmed command.
  While a command is pending the panel shows "busy", never a guessed state.
- A display name edit is applied at once and never rolled back.
- A newer transient message replaces the current one; an expiry only clears
  the message it was scheduled for.
- A fatal error blocks new commands and renames for the rest of the session.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta

from pylockpanel._constants import (
    DEFAULT_MESSAGE_TTL,
    MSG_CLOSE_FAILED,
    MSG_CLOSED,
    MSG_CLOSING,
    MSG_OPEN_FAILED,
    MSG_OPENED,
    MSG_OPENING,
    MSG_REGISTRATION_REQUIRED,
    MSG_RENAME_FAILED,
    MSG_RENAMED,
    MSG_STATUS_ESCALATED,
    MSG_STATUS_UNAVAILABLE,
)
from pylockpanel.config import LockPanelConfig
from pylockpanel.models.session import (
    CommandKind,
    Identity,
    LockBelief,
    SessionState,
    TransientMessage,
)
from pylockpanel.state.events import (
    CommandFailed,
    CommandIssued,
    CommandSucceeded,
    IdentityLookupFailed,
    IdentityResolved,
    IdentityUnregistered,
    MessageExpired,
    Mounted,
    RenameFailed,
    RenameRequested,
    RenameSucceeded,
    SessionEvent,
    StatusRefreshed,
    StatusRefreshFailed,
)

_STARTED_TEXT: dict[CommandKind, str] = {CommandKind.OPEN: MSG_OPENING, CommandKind.CLOSE: MSG_CLOSING}
_DONE_TEXT: dict[CommandKind, str] = {CommandKind.OPEN: MSG_OPENED, CommandKind.CLOSE: MSG_CLOSED}
_FAILED_TEXT: dict[CommandKind, str] = {CommandKind.OPEN: MSG_OPEN_FAILED, CommandKind.CLOSE: MSG_CLOSE_FAILED}


@dataclasses.dataclass(frozen=True)
class SessionPolicy:
    """Tunables of the state machine."""

    message_ttl: timedelta = timedelta(seconds=DEFAULT_MESSAGE_TTL)
    status_failure_threshold: int | None = None

    @classmethod
    def from_config(cls, config: LockPanelConfig) -> SessionPolicy:
        return cls(
            message_ttl=timedelta(seconds=config.message_ttl),
            status_failure_threshold=config.status_failure_threshold,
        )


DEFAULT_POLICY = SessionPolicy()


def can_command(state: SessionState) -> bool:
    """Whether the open/close buttons accept a click."""
    return not state.is_fatal and not state.command_in_flight and state.identity.is_registered


def can_rename(state: SessionState) -> bool:
    """Whether the display name field accepts edits."""
    return not state.is_fatal and state.identity.is_registered


def _with_message(state: SessionState, text: str, at: datetime, policy: SessionPolicy) -> dict[str, object]:
    seq = state.message_seq + 1
    return {
        "message": TransientMessage(text=text, expires_at=at + policy.message_ttl, seq=seq),
        "message_seq": seq,
    }


def _with_fatal(state: SessionState, text: str) -> SessionState:
    # The first fatal condition is the one reported.
    if state.is_fatal:
        return state
    return state.model_copy(update={"fatal_error": text})


def apply_event(
    state: SessionState,
    event: SessionEvent,
    policy: SessionPolicy = DEFAULT_POLICY,
) -> SessionState:
    """Return the state that results from *event*."""
    at = event.observed_at

    if isinstance(event, Mounted):
        user_id = event.user_id.strip() if event.user_id else None
        if not user_id:
            return SessionState(fatal_error=MSG_REGISTRATION_REQUIRED)
        return SessionState(identity=Identity(user_id=user_id))

    if isinstance(event, IdentityResolved):
        identity = state.identity.model_copy(update={"display_name": event.display_name})
        return state.model_copy(update={"identity": identity})

    if isinstance(event, IdentityUnregistered):
        return _with_fatal(state, MSG_REGISTRATION_REQUIRED)

    if isinstance(event, IdentityLookupFailed):
        return _with_fatal(state, event.detail)

    if isinstance(event, StatusRefreshed):
        return state.model_copy(
            update={
                "lock": LockBelief.from_locked(event.locked),
                "status_failures": 0,
                "error": None,
            }
        )

    if isinstance(event, StatusRefreshFailed):
        failures = state.status_failures + 1
        new_state = state.model_copy(
            update={
                "lock": LockBelief.UNKNOWN,
                "status_failures": failures,
                "error": event.detail or MSG_STATUS_UNAVAILABLE,
            }
        )
        threshold = policy.status_failure_threshold
        if threshold is not None and failures >= threshold:
            return _with_fatal(new_state, MSG_STATUS_ESCALATED.format(count=failures))
        return new_state

    if isinstance(event, CommandIssued):
        if not can_command(state):
            return state
        return state.model_copy(
            update={
                "pending_command": event.command,
                **_with_message(state, _STARTED_TEXT[event.command], at, policy),
            }
        )

    if isinstance(event, CommandSucceeded):
        return state.model_copy(
            update={
                "lock": event.command.resulting_belief,
                "pending_command": None,
                "error": None,
                **_with_message(state, _DONE_TEXT[event.command], at, policy),
            }
        )

    if isinstance(event, CommandFailed):
        return state.model_copy(
            update={
                "pending_command": None,
                "message": None,
                "error": event.detail or _FAILED_TEXT[event.command],
            }
        )

    if isinstance(event, RenameRequested):
        if not can_rename(state):
            return state
        identity = state.identity.model_copy(update={"display_name": event.name})
        return state.model_copy(update={"identity": identity})

    if isinstance(event, RenameSucceeded):
        return state.model_copy(update={"error": None, **_with_message(state, MSG_RENAMED, at, policy)})

    if isinstance(event, RenameFailed):
        return state.model_copy(update={"error": event.detail or MSG_RENAME_FAILED})

    if isinstance(event, MessageExpired):
        if state.message is None or state.message.seq != event.seq:
            return state
        return state.model_copy(update={"message": None})

    raise TypeError(f"Unhandled session event: {type(event).__name__}")
