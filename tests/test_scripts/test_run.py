"""Tests for scripts/run.py — startup wiring, shutdown and exit codes."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from alertlight.core.config import reset_settings
from alertlight.core.types import OutputLevel
from alertlight.outputs.backends import StubPinBackend
from alertlight.outputs.shutdown import (
    EXIT_OK,
    EXIT_SHUTDOWN_HARDWARE_FAILURE,
    ShutdownGuard,
)
from scripts import run as run_script

CRIT_PIN = 18
WARN_PIN = 14


# ── Helpers ─────────────────────────────────────────────────────


def _args(tmp_path: Path, **kw: object) -> argparse.Namespace:
    defaults: dict[str, object] = {
        "config": str(tmp_path / "missing.yaml"),
        "log_level": None,
        "verbose": False,
        "log_file": None,
        "port": None,
        "backend": "stub",
    }
    defaults.update(kw)
    return argparse.Namespace(**defaults)


@pytest.fixture(autouse=True)
def _clean_settings() -> Iterator[None]:
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def guards(monkeypatch: pytest.MonkeyPatch) -> list[ShutdownGuard]:
    """Collect guards built by run() instead of hooking real signals."""
    installed: list[ShutdownGuard] = []
    monkeypatch.setattr(run_script, "setup_logging", lambda **kw: None)
    monkeypatch.setattr(ShutdownGuard, "install", lambda self, loop=None: installed.append(self))
    monkeypatch.setattr(ShutdownGuard, "uninstall", lambda self, loop=None: None)
    return installed


def _use_backend(monkeypatch: pytest.MonkeyPatch, backend: StubPinBackend) -> None:
    monkeypatch.setattr(run_script, "create_pin_backend", lambda config: backend)


def _fake_server(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    runner = MagicMock()
    runner.cleanup = AsyncMock()
    monkeypatch.setattr(run_script, "start_webhook_server", AsyncMock(return_value=runner))
    return runner


async def _run_until_triggered(
    args: argparse.Namespace, guards: list[ShutdownGuard],
) -> int:
    task = asyncio.create_task(run_script.run(args))
    for _ in range(200):
        if guards:
            break
        await asyncio.sleep(0.01)
    assert guards, "run() never installed its shutdown guard"
    await asyncio.sleep(0)
    guards[0].trigger()
    return await asyncio.wait_for(task, timeout=2.0)


# ── Normal lifecycle ────────────────────────────────────────────


class TestRun:
    async def test_clears_lights_then_exits_ok(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, guards: list[ShutdownGuard],
    ) -> None:
        backend = StubPinBackend()
        _use_backend(monkeypatch, backend)
        runner = _fake_server(monkeypatch)

        code = await _run_until_triggered(_args(tmp_path), guards)

        assert code == EXIT_OK
        assert backend.open_calls >= 2  # startup reset + shutdown
        assert backend.levels == {
            CRIT_PIN: OutputLevel.DEASSERTED,
            WARN_PIN: OutputLevel.DEASSERTED,
        }
        runner.cleanup.assert_awaited_once()

    async def test_startup_continues_when_hardware_unavailable(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, guards: list[ShutdownGuard],
    ) -> None:
        backend = StubPinBackend(available=False)
        _use_backend(monkeypatch, backend)
        runner = _fake_server(monkeypatch)

        code = await _run_until_triggered(_args(tmp_path), guards)

        assert code == EXIT_SHUTDOWN_HARDWARE_FAILURE
        runner.cleanup.assert_awaited_once()

    @pytest.mark.usefixtures("not_a_raspberry_pi")
    async def test_gpio_backend_on_non_pi_host(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, guards: list[ShutdownGuard],
    ) -> None:
        _fake_server(monkeypatch)
        code = await _run_until_triggered(_args(tmp_path, backend="gpio"), guards)
        assert code == EXIT_SHUTDOWN_HARDWARE_FAILURE


# ── Listener failures ───────────────────────────────────────────


class TestBindFailure:
    async def test_bind_failure_is_startup_failure(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, guards: list[ShutdownGuard],
    ) -> None:
        backend = StubPinBackend()
        _use_backend(monkeypatch, backend)
        monkeypatch.setattr(
            run_script,
            "start_webhook_server",
            AsyncMock(side_effect=OSError("address already in use")),
        )

        code = await run_script.run(_args(tmp_path))

        assert code == run_script.EXIT_STARTUP_FAILURE
        assert guards[0].triggered is True
        assert backend.level(CRIT_PIN) == OutputLevel.DEASSERTED

    async def test_bind_failure_with_hardware_failure_keeps_hardware_code(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, guards: list[ShutdownGuard],
    ) -> None:
        _use_backend(monkeypatch, StubPinBackend(available=False))
        monkeypatch.setattr(
            run_script,
            "start_webhook_server",
            AsyncMock(side_effect=OSError("address already in use")),
        )

        code = await run_script.run(_args(tmp_path))

        assert code == EXIT_SHUTDOWN_HARDWARE_FAILURE
