from __future__ import annotations

import asyncio
import importlib.util
from pathlib import Path
from types import ModuleType

import pytest

_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "panel_console.py"


@pytest.fixture
def console() -> ModuleType:
    spec = importlib.util.spec_from_file_location("panel_console", _SCRIPT)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class _SlowPanel:
    """Panel whose open command never completes on its own."""

    def __init__(self) -> None:
        self.opened = asyncio.Event()
        self.cancelled = False
        self.refreshes = 0

    async def open(self) -> bool:
        self.opened.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return True

    async def refresh(self) -> None:
        self.refreshes += 1


def _feed(console: ModuleType, monkeypatch: pytest.MonkeyPatch, panel: _SlowPanel, lines: list[str]) -> None:
    remaining = iter(lines)

    async def read_line() -> str:
        line = next(remaining, "")
        if line in {"", "quit\n"}:
            # Let the background command start before leaving.
            await panel.opened.wait()
        return line

    monkeypatch.setattr(console, "_read_line", read_line)


@pytest.mark.asyncio
async def test_quit_cancels_running_commands(console: ModuleType, monkeypatch: pytest.MonkeyPatch) -> None:
    panel = _SlowPanel()
    _feed(console, monkeypatch, panel, ["open\n", "refresh\n", "quit\n"])

    await asyncio.wait_for(console.serve(panel), timeout=2)

    assert panel.refreshes == 1
    assert panel.cancelled


@pytest.mark.asyncio
async def test_end_of_input_cancels_running_commands(
    console: ModuleType, monkeypatch: pytest.MonkeyPatch
) -> None:
    panel = _SlowPanel()
    _feed(console, monkeypatch, panel, ["open\n"])

    await asyncio.wait_for(console.serve(panel), timeout=2)

    assert panel.cancelled
