from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest

from pywearsync.models.display import DisplayMode
from pywearsync.models.weather import WeatherSnapshot
from pywearsync.state.store import PersistedStateStore

# 2026-01-01T00:00:00.25Z; quarter seconds are exact in binary floating point.
START_WALL_TIME = 1_767_225_600.25


class FakeHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Deterministic stand-in for the asyncio loop; its clock is the wall clock."""

    def __init__(self, start: float = START_WALL_TIME) -> None:
        self.now = start
        self._timers: list[FakeHandle] = []
        self._ready: list[tuple[Callable[..., Any], tuple[Any, ...]]] = []

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.now + delay, callback, args)
        self._timers.append(handle)
        return handle

    def call_soon_threadsafe(self, callback: Callable[..., Any], *args: Any) -> None:
        self._ready.append((callback, args))

    @property
    def pending_timers(self) -> list[FakeHandle]:
        return [handle for handle in self._timers if not handle.cancelled]

    def run_ready(self) -> None:
        ready, self._ready = self._ready, []
        for callback, args in ready:
            callback(*args)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            self.run_ready()
            due = sorted((h for h in self.pending_timers if h.when <= target), key=lambda h: h.when)
            if not due:
                break
            handle = due[0]
            self._timers.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target


class RecordingSurface:
    def __init__(self) -> None:
        self.calls: list[tuple[datetime, WeatherSnapshot, DisplayMode]] = []

    def render(self, now: datetime, snapshot: WeatherSnapshot, mode: DisplayMode) -> None:
        self.calls.append((now, snapshot, mode))


@pytest.fixture
def loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def store() -> PersistedStateStore:
    return PersistedStateStore()
