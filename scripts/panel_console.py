#!/usr/bin/env python3
"""Terminal front-end for the lock panel.

Mounts one :class:`LockSessionController`, prints the panel every time its
state changes and reads commands from stdin.

Usage
-----
::

    export LOCKPANEL_BASE_URL="https://lock.example.com"
    python scripts/panel_console.py --save-id 5f0c...   # once, after registering
    python scripts/panel_console.py

Commands::

    open | close | rename <name> | refresh | quit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Coroutine
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pylockpanel import (  # noqa: E402
    CommandKind,
    IdentifierStore,
    LockBelief,
    LockPanelConfig,
    LockSessionController,
    SessionState,
)
from pylockpanel.state.transitions import can_command  # noqa: E402

_BELIEF_LABEL = {
    LockBelief.LOCKED: "[locked]",
    LockBelief.UNLOCKED: "[unlocked]",
    LockBelief.UNKNOWN: "[?]",
}


def render(state: SessionState) -> str:
    lines = [f"  state   : {_BELIEF_LABEL[state.lock]}"]
    lines.append(f"  user    : {state.identity.display_name or '-'}")
    if state.message is not None:
        lines.append(f"  message : {state.message.text}")
    if state.fatal_error is not None:
        lines.append(f"  FATAL   : {state.fatal_error}")
    elif state.error is not None:
        lines.append(f"  error   : {state.error}")
    lines.append(f"  buttons : {'enabled' if can_command(state) else 'disabled'}")
    return "\n".join(lines)


def _print_state(state: SessionState) -> None:
    print("-" * 40)
    print(render(state))


def _print_animation(command: CommandKind) -> None:
    print("  ~~ turning left ~~" if command is CommandKind.OPEN else "  ~~ turning right ~~")


def _spawn(pending: set[asyncio.Task[object]], coro: Coroutine[object, object, object]) -> None:
    task = asyncio.create_task(coro)
    pending.add(task)
    task.add_done_callback(pending.discard)


async def _read_line() -> str:
    return await asyncio.get_running_loop().run_in_executor(None, sys.stdin.readline)


async def run(config: LockPanelConfig) -> None:
    async with LockSessionController(
        config,
        on_change=_print_state,
        on_animation=_print_animation,
    ) as panel:
        await serve(panel)


async def serve(panel: LockSessionController) -> None:
    """Handle stdin commands until EOF or ``quit``.

    Commands still running at that point are cancelled and awaited before
    returning, so none outlives the panel session.
    """
    pending: set[asyncio.Task[object]] = set()
    try:
        await _command_loop(panel, pending)
    finally:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)


async def _command_loop(panel: LockSessionController, pending: set[asyncio.Task[object]]) -> None:
    while True:
        line = await _read_line()
        if not line:
            return
        command, _, argument = line.strip().partition(" ")
        if command in {"quit", "exit"}:
            return
        if command == "open":
            # Commands run in the background so polling and typing continue.
            _spawn(pending, panel.open())
        elif command == "close":
            _spawn(pending, panel.close())
        elif command == "rename":
            _spawn(pending, panel.rename(argument))
        elif command == "refresh":
            await panel.refresh()
        elif command:
            print(f"unknown command: {command}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Lock panel console")
    parser.add_argument("--base-url", help="Lock service base URL (default: $LOCKPANEL_BASE_URL)")
    parser.add_argument("--storage", type=Path, help="Identifier store path")
    parser.add_argument("--save-id", metavar="USER_ID", help="Persist an identifier obtained at registration and exit")
    parser.add_argument("--refresh-interval", type=float, help="Seconds between status refreshes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, object] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.storage:
        overrides["storage_path"] = args.storage
    if args.refresh_interval:
        overrides["refresh_interval"] = args.refresh_interval
    config = LockPanelConfig.from_env(**overrides)

    if args.save_id:
        IdentifierStore(config.storage_path).save(args.save_id)
        print(f"Identifier saved to {config.storage_path}")
        return

    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
