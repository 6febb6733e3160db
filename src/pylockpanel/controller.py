"""Lock session controller: one panel view's state, timers and remote calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import aiohttp

from pylockpanel._api.identity import save_name
from pylockpanel._api.lock import fetch_status, send_command
from pylockpanel._redact import mask_identifier
from pylockpanel._transport import HttpTransport, Transport
from pylockpanel.config import LockPanelConfig
from pylockpanel.exceptions import LockPanelError
from pylockpanel.identity import IdentityResolver
from pylockpanel.models.session import CommandKind, SessionState
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
from pylockpanel.state.transitions import SessionPolicy, apply_event, can_command, can_rename
from pylockpanel.storage import IdentifierStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _failure_detail(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def _log_failure(action: str, exc: Exception) -> None:
    # Tracebacks only for errors outside the LockPanelError tree.
    _logger.warning("%s failed: %s", action, _failure_detail(exc), exc_info=not isinstance(exc, LockPanelError))


class LockSessionController:
    """Drives one lock panel session.

    Owns the :class:`SessionState`, runs the periodic status refresh and the
    transient message timer, and executes user commands. Every failure of
    a remote call is turned into state; nothing raised by the transport
    escapes the public operations. Results of calls started before an
    unmount are dropped, also when the controller is mounted again.

    Usage::

        async with LockSessionController(config) as panel:
            await panel.open()
            print(panel.state.lock)
    """

    def __init__(
        self,
        config: LockPanelConfig,
        *,
        http_session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        store: IdentifierStore | None = None,
        on_change: Callable[[SessionState], None] | None = None,
        on_animation: Callable[[CommandKind], None] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._external_session = http_session is not None
        self._http_session = http_session
        self._transport = transport
        self._owns_transport = transport is None
        self._store = store if store is not None else IdentifierStore(config.storage_path)
        self._policy = SessionPolicy.from_config(config)
        self._on_change = on_change
        self._on_animation = on_animation
        self._clock = clock
        self._state = SessionState()
        self._mounted = False
        self._refresh_task: asyncio.Task[None] | None = None
        self._message_task: asyncio.Task[None] | None = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LockSessionController:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        await self.mount()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.unmount()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if self._owns_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    # ------------------------------------------------------------------
    # Mount / unmount
    # ------------------------------------------------------------------

    async def mount(self) -> SessionState:
        """Load the identifier, resolve the identity and start polling.

        Without a stored identifier the session goes straight to its fatal
        state and no remote call is made.
        """
        transport = self._require_transport()
        if self._mounted:
            raise LockPanelError("Controller is already mounted")
        self._mounted = True
        self._generation += 1

        stored_id = self._config.user_id if self._config.user_id is not None else self._store.load()
        self._dispatch(Mounted(user_id=stored_id, observed_at=self._clock()))
        if self._state.is_fatal:
            return self._state

        _logger.debug("Mounted panel for %s", mask_identifier(self._state.identity.user_id))
        await asyncio.gather(
            self._resolve_identity(IdentityResolver(transport), stored_id),
            self.refresh(),
        )
        if self._mounted and not self._state.is_fatal:
            self._refresh_task = asyncio.create_task(self._refresh_loop())
        return self._state

    async def unmount(self) -> None:
        """Cancel the timers; late resolutions of in-flight calls become no-ops."""
        if not self._mounted:
            return
        self._mounted = False
        tasks = [task for task in (self._refresh_task, self._message_task) if task is not None]
        self._refresh_task = None
        self._message_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        _logger.debug("Unmounted panel")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Read the lock state once and update the belief."""
        if not self._mounted or self._state.is_fatal:
            return
        user_id = self._require_user_id()
        generation = self._generation
        try:
            response = await fetch_status(self._require_transport(), user_id)
        except Exception as exc:
            _log_failure("Status refresh", exc)
            self._dispatch_result(
                generation,
                StatusRefreshFailed(detail=_failure_detail(exc), observed_at=self._clock()),
            )
            return

        if response.success:
            self._dispatch_result(generation, StatusRefreshed(locked=bool(response.locked), observed_at=self._clock()))
        else:
            _logger.warning("Status refresh reported failure")
            self._dispatch_result(generation, StatusRefreshFailed(observed_at=self._clock()))

    async def open(self) -> bool:
        """Unlock. Returns ``False`` when the panel did not accept the click."""
        return await self._command(CommandKind.OPEN)

    async def close(self) -> bool:
        """Lock. Returns ``False`` when the panel did not accept the click."""
        return await self._command(CommandKind.CLOSE)

    async def rename(self, name: str) -> bool:
        """Change the display name.

        The new name is shown immediately and kept even if the service
        rejects it. Returns ``False`` when renaming is disabled.
        """
        if not self._mounted or not can_rename(self._state):
            _logger.debug("Ignoring rename: panel not accepting edits")
            return False
        user_id = self._require_user_id()
        self._dispatch(RenameRequested(name=name, observed_at=self._clock()))
        generation = self._generation
        try:
            ack = await save_name(self._require_transport(), user_id, name)
        except Exception as exc:
            _log_failure("Rename", exc)
            self._dispatch_result(generation, RenameFailed(detail=_failure_detail(exc), observed_at=self._clock()))
            return True

        if ack.success:
            self._dispatch_result(generation, RenameSucceeded(observed_at=self._clock()))
        else:
            _logger.warning("Rename rejected by the service")
            self._dispatch_result(generation, RenameFailed(observed_at=self._clock()))
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise LockPanelError("Controller not initialized. Use 'async with LockSessionController(...) as panel:'")
        return self._transport

    def _require_user_id(self) -> str:
        user_id = self._state.identity.user_id
        if user_id is None:
            raise LockPanelError("Session has no identifier")
        return user_id

    async def _resolve_identity(self, resolver: IdentityResolver, stored_id: str | None) -> None:
        generation = self._generation
        try:
            identity = await resolver.resolve(stored_id)
        except Exception as exc:
            _log_failure("Identity lookup", exc)
            self._dispatch_result(
                generation,
                IdentityLookupFailed(detail=_failure_detail(exc), observed_at=self._clock()),
            )
            return
        if identity.is_registered and identity.display_name is not None:
            self._dispatch_result(
                generation,
                IdentityResolved(display_name=identity.display_name, observed_at=self._clock()),
            )
        else:
            self._dispatch_result(generation, IdentityUnregistered(observed_at=self._clock()))

    async def _command(self, command: CommandKind) -> bool:
        if not self._mounted or not can_command(self._state):
            _logger.debug("Ignoring %s: panel not accepting commands", command)
            return False
        user_id = self._require_user_id()
        # No await between the check above and this dispatch, so a second
        # click always observes the pending command.
        self._dispatch(CommandIssued(command=command, observed_at=self._clock()))
        generation = self._generation
        _logger.info("Issuing %s command", command)
        try:
            ack = await send_command(self._require_transport(), user_id, command)
        except Exception as exc:
            _log_failure(f"{command} command", exc)
            self._dispatch_result(
                generation,
                CommandFailed(command=command, detail=_failure_detail(exc), observed_at=self._clock()),
            )
            return True

        if ack.success:
            _logger.info("%s command confirmed", command)
            if self._dispatch_result(generation, CommandSucceeded(command=command, observed_at=self._clock())):
                self._notify_animation(command)
        else:
            _logger.warning("%s command rejected by the service", command)
            self._dispatch_result(generation, CommandFailed(command=command, observed_at=self._clock()))
        return True

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self._config.refresh_interval)
            if self._state.is_fatal:
                _logger.debug("Session is fatal; stopping status refresh")
                return
            await self.refresh()

    async def _expire_message(self, seq: int, delay: float) -> None:
        await asyncio.sleep(delay)
        # Detach first so the dispatch below does not cancel this task.
        self._message_task = None
        self._dispatch(MessageExpired(seq=seq, observed_at=self._clock()))

    def _dispatch_result(self, generation: int, event: SessionEvent) -> bool:
        """Dispatch the outcome of a remote call started during mount *generation*."""
        if generation != self._generation:
            _logger.debug("Dropping %s from an earlier mount", type(event).__name__)
            return False
        self._dispatch(event)
        return self._mounted

    def _dispatch(self, event: SessionEvent) -> None:
        if not self._mounted:
            _logger.debug("Dropping %s after unmount", type(event).__name__)
            return
        previous = self._state
        self._state = apply_event(previous, event, self._policy)
        if self._state == previous:
            return
        if self._state.is_fatal and not previous.is_fatal:
            _logger.warning("Panel disabled: %s", self._state.fatal_error)
        self._sync_message_timer(previous)
        self._notify_change()

    def _sync_message_timer(self, previous: SessionState) -> None:
        message = self._state.message
        if message is None:
            if previous.message is not None:
                self._cancel_message_timer()
            return
        if previous.message is not None and previous.message.seq == message.seq:
            return
        self._cancel_message_timer()
        delay = max(0.0, (message.expires_at - self._clock()).total_seconds())
        self._message_task = asyncio.create_task(self._expire_message(message.seq, delay))

    def _cancel_message_timer(self) -> None:
        task = self._message_task
        self._message_task = None
        if task is not None and not task.done():
            task.cancel()

    def _notify_change(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self._state)
        except Exception:
            _logger.debug("on_change callback failed", exc_info=True)

    def _notify_animation(self, command: CommandKind) -> None:
        if self._on_animation is None or not self._mounted:
            return
        try:
            self._on_animation(command)
        except Exception:
            _logger.debug("on_animation callback failed", exc_info=True)
