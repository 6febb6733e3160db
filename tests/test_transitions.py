from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pylockpanel._constants import (
    MSG_CLOSE_FAILED,
    MSG_CLOSED,
    MSG_CLOSING,
    MSG_OPEN_FAILED,
    MSG_OPENED,
    MSG_OPENING,
    MSG_REGISTRATION_REQUIRED,
    MSG_RENAME_FAILED,
    MSG_RENAMED,
    MSG_STATUS_UNAVAILABLE,
)
from pylockpanel.models.session import CommandKind, Identity, LockBelief, SessionState
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
    StatusRefreshed,
    StatusRefreshFailed,
)
from pylockpanel.state.transitions import SessionPolicy, apply_event, can_command, can_rename


def _dt(seconds: float = 0.0) -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC) + timedelta(seconds=seconds)


def _ready(lock: LockBelief = LockBelief.LOCKED) -> SessionState:
    return SessionState(identity=Identity(user_id="user-1", display_name="Kenji"), lock=lock)


def test_mount_without_identifier_is_fatal() -> None:
    state = apply_event(SessionState(), Mounted(user_id=None, observed_at=_dt()))

    assert state.fatal_error == MSG_REGISTRATION_REQUIRED
    assert state.lock is LockBelief.UNKNOWN
    assert not can_command(state)
    assert not can_rename(state)


def test_mount_with_blank_identifier_is_fatal() -> None:
    state = apply_event(SessionState(), Mounted(user_id="   ", observed_at=_dt()))

    assert state.fatal_error == MSG_REGISTRATION_REQUIRED


def test_mount_resets_to_unknown_with_identifier() -> None:
    state = apply_event(_ready(LockBelief.UNLOCKED), Mounted(user_id="user-2", observed_at=_dt()))

    assert state.identity == Identity(user_id="user-2")
    assert state.lock is LockBelief.UNKNOWN
    assert state.fatal_error is None
    # Commands wait for the display name.
    assert not can_command(state)


def test_identity_outcomes() -> None:
    mounted = apply_event(SessionState(), Mounted(user_id="user-1", observed_at=_dt()))

    resolved = apply_event(mounted, IdentityResolved(display_name="Kenji", observed_at=_dt()))
    assert resolved.identity.display_name == "Kenji"
    assert can_command(resolved)

    unregistered = apply_event(mounted, IdentityUnregistered(observed_at=_dt()))
    assert unregistered.fatal_error == MSG_REGISTRATION_REQUIRED

    failed = apply_event(mounted, IdentityLookupFailed(detail="HTTP 500 from /api/get_name", observed_at=_dt()))
    assert failed.fatal_error == "HTTP 500 from /api/get_name"


def test_first_fatal_condition_is_kept() -> None:
    state = apply_event(SessionState(), Mounted(user_id=None, observed_at=_dt()))
    state = apply_event(state, IdentityLookupFailed(detail="later failure", observed_at=_dt()))

    assert state.fatal_error == MSG_REGISTRATION_REQUIRED


@pytest.mark.parametrize(
    ("outcomes", "expected"),
    [
        ([True], LockBelief.LOCKED),
        ([False], LockBelief.UNLOCKED),
        ([True, None], LockBelief.UNKNOWN),
        ([None, False], LockBelief.UNLOCKED),
        ([True, False, None, None, True], LockBelief.LOCKED),
        ([False, "boom"], LockBelief.UNKNOWN),
    ],
)
def test_belief_follows_latest_status_resolution(outcomes: list[bool | str | None], expected: LockBelief) -> None:
    # bool -> reported state, None -> logical failure, str -> transport failure
    state = _ready(LockBelief.UNKNOWN)
    for i, outcome in enumerate(outcomes):
        if isinstance(outcome, bool):
            state = apply_event(state, StatusRefreshed(locked=outcome, observed_at=_dt(i)))
        else:
            state = apply_event(state, StatusRefreshFailed(detail=outcome, observed_at=_dt(i)))

    assert state.lock is expected


def test_status_failure_sets_persistent_error_and_success_clears_it() -> None:
    state = apply_event(_ready(), StatusRefreshFailed(observed_at=_dt()))
    assert state.error == MSG_STATUS_UNAVAILABLE
    assert state.message is None

    state = apply_event(state, StatusRefreshFailed(detail="timed out", observed_at=_dt(1)))
    assert state.error == "timed out"
    assert state.status_failures == 2

    state = apply_event(state, StatusRefreshed(locked=True, observed_at=_dt(2)))
    assert state.error is None
    assert state.status_failures == 0


def test_repeated_status_failures_never_escalate_by_default() -> None:
    state = _ready()
    for i in range(50):
        state = apply_event(state, StatusRefreshFailed(detail="down", observed_at=_dt(i)))

    assert state.fatal_error is None
    assert state.lock is LockBelief.UNKNOWN
    assert can_command(state)


def test_status_failure_threshold_escalates_to_fatal() -> None:
    policy = SessionPolicy(status_failure_threshold=3)
    state = _ready()
    state = apply_event(state, StatusRefreshFailed(observed_at=_dt(0)), policy)
    state = apply_event(state, StatusRefreshFailed(observed_at=_dt(1)), policy)
    # A success in between resets the streak.
    state = apply_event(state, StatusRefreshed(locked=True, observed_at=_dt(2)), policy)
    state = apply_event(state, StatusRefreshFailed(observed_at=_dt(3)), policy)
    state = apply_event(state, StatusRefreshFailed(observed_at=_dt(4)), policy)
    assert state.fatal_error is None

    state = apply_event(state, StatusRefreshFailed(observed_at=_dt(5)), policy)
    assert state.fatal_error is not None
    assert "3" in state.fatal_error
    assert not can_command(state)


def test_open_is_busy_then_confirmed() -> None:
    policy = SessionPolicy(message_ttl=timedelta(seconds=3))
    state = apply_event(_ready(), CommandIssued(command=CommandKind.OPEN, observed_at=_dt()), policy)

    assert state.command_in_flight
    assert state.lock is LockBelief.LOCKED
    assert state.message is not None
    assert state.message.text == MSG_OPENING
    assert not can_command(state)

    state = apply_event(state, CommandSucceeded(command=CommandKind.OPEN, observed_at=_dt(1)), policy)
    assert not state.command_in_flight
    assert state.lock is LockBelief.UNLOCKED
    assert state.message is not None
    assert state.message.text == MSG_OPENED
    assert state.message.expires_at == _dt(4)


def test_close_mirrors_open() -> None:
    state = apply_event(_ready(LockBelief.UNLOCKED), CommandIssued(command=CommandKind.CLOSE, observed_at=_dt()))
    assert state.message is not None and state.message.text == MSG_CLOSING

    state = apply_event(state, CommandSucceeded(command=CommandKind.CLOSE, observed_at=_dt(1)))
    assert state.lock is LockBelief.LOCKED
    assert state.message is not None and state.message.text == MSG_CLOSED


def test_second_command_while_in_flight_is_ignored() -> None:
    state = apply_event(_ready(), CommandIssued(command=CommandKind.OPEN, observed_at=_dt()))
    again = apply_event(state, CommandIssued(command=CommandKind.CLOSE, observed_at=_dt(1)))

    assert again == state


@pytest.mark.parametrize(
    ("command", "detail", "expected"),
    [
        (CommandKind.OPEN, None, MSG_OPEN_FAILED),
        (CommandKind.CLOSE, None, MSG_CLOSE_FAILED),
        (CommandKind.OPEN, "Request to /api/open failed: reset", "Request to /api/open failed: reset"),
    ],
)
def test_command_failure_clears_message_and_sets_error(command: CommandKind, detail: str | None, expected: str) -> None:
    state = apply_event(_ready(), CommandIssued(command=command, observed_at=_dt()))
    state = apply_event(state, CommandFailed(command=command, detail=detail, observed_at=_dt(1)))

    assert not state.command_in_flight
    assert state.message is None
    assert state.error == expected
    assert state.lock is LockBelief.LOCKED
    assert can_command(state)


def test_status_result_applies_while_command_in_flight() -> None:
    state = apply_event(_ready(LockBelief.UNLOCKED), CommandIssued(command=CommandKind.CLOSE, observed_at=_dt()))
    state = apply_event(state, StatusRefreshed(locked=True, observed_at=_dt(1)))
    assert state.lock is LockBelief.LOCKED
    assert state.command_in_flight

    state = apply_event(state, StatusRefreshFailed(observed_at=_dt(2)))
    assert state.lock is LockBelief.UNKNOWN

    state = apply_event(state, CommandSucceeded(command=CommandKind.CLOSE, observed_at=_dt(3)))
    assert state.lock is LockBelief.LOCKED


def test_newer_message_is_not_cleared_by_older_expiry() -> None:
    state = apply_event(_ready(), CommandIssued(command=CommandKind.OPEN, observed_at=_dt()))
    first_seq = state.message.seq if state.message else -1
    state = apply_event(state, CommandSucceeded(command=CommandKind.OPEN, observed_at=_dt(1)))

    state = apply_event(state, MessageExpired(seq=first_seq, observed_at=_dt(3)))
    assert state.message is not None
    assert state.message.text == MSG_OPENED

    state = apply_event(state, MessageExpired(seq=state.message.seq, observed_at=_dt(4)))
    assert state.message is None


def test_rename_is_optimistic_and_never_rolled_back() -> None:
    state = apply_event(_ready(), RenameRequested(name="Hana", observed_at=_dt()))
    assert state.identity.display_name == "Hana"

    failed = apply_event(state, RenameFailed(observed_at=_dt(1)))
    assert failed.identity.display_name == "Hana"
    assert failed.error == MSG_RENAME_FAILED

    ok = apply_event(state, RenameSucceeded(observed_at=_dt(1)))
    assert ok.message is not None and ok.message.text == MSG_RENAMED
    assert ok.error is None


def test_fatal_error_blocks_commands_and_renames() -> None:
    state = _ready().model_copy(update={"fatal_error": "gone"})

    assert apply_event(state, CommandIssued(command=CommandKind.OPEN, observed_at=_dt())) == state
    assert apply_event(state, RenameRequested(name="Hana", observed_at=_dt())) == state


def test_naive_timestamps_are_treated_as_utc() -> None:
    event = StatusRefreshed(locked=True, observed_at=datetime(2026, 1, 1))
    assert event.observed_at.tzinfo is UTC
