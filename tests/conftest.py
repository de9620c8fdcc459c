"""Shared test fixtures for Stepgate."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from stepgate.core.controller import GateController
from stepgate.routing.notifier import NotificationSink

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """A manually advanced UTC clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += timedelta(milliseconds=ms)


class RecordingLog:
    """Captures info/warning calls the way a ``logging.Logger`` would format them."""

    def __init__(self) -> None:
        self.infos: list[str] = []
        self.warnings: list[str] = []

    def info(self, msg: str, *args: Any) -> None:
        self.infos.append(msg % args if args else msg)

    def warning(self, msg: str, *args: Any) -> None:
        self.warnings.append(msg % args if args else msg)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Provide an empty project directory for step outputs."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def write_output(project_root: Path) -> Callable[[str, str], Path]:
    """Factory fixture: write a step output file under the project root."""

    def _write(relative: str, content: str) -> Path:
        path = project_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def clock() -> FakeClock:
    """Provide a deterministic clock starting at T0."""
    return FakeClock()


@pytest.fixture
def recording_log() -> RecordingLog:
    """Provide a log that records every message."""
    return RecordingLog()


@pytest.fixture
def notifier(recording_log: RecordingLog, clock: FakeClock) -> NotificationSink:
    """Provide a log-only NotificationSink (no transport configured)."""
    return NotificationSink(log=recording_log, clock=clock)


@pytest.fixture
def make_controller(
    project_root: Path, notifier: NotificationSink, clock: FakeClock
) -> Callable[..., GateController]:
    """Factory fixture: build a GateController with test defaults."""

    def _factory(output_map: dict[int, str] | None = None, **overrides: Any) -> GateController:
        defaults: dict[str, Any] = {
            "notifier": notifier,
            "clock": clock,
        }
        defaults.update(overrides)
        return GateController(project_root, output_map or {}, **defaults)

    return _factory
