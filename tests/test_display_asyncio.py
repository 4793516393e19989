from __future__ import annotations

import asyncio

import pytest

from conftest import RecordingSurface
from pywearsync.display import DisplayStateMachine
from pywearsync.models.weather import WeatherIcon, WeatherSnapshot
from pywearsync.state.store import PersistedStateStore


@pytest.mark.asyncio
async def test_display_runs_on_event_loop_and_receives_cross_thread_updates() -> None:
    loop = asyncio.get_running_loop()
    store = PersistedStateStore()
    surface = RecordingSurface()
    display = DisplayStateMachine(store, surface, loop=loop, update_rate_ms=50, time_zone="UTC")

    display.on_create()
    display.on_visibility_changed(True)

    await asyncio.to_thread(store.put, WeatherSnapshot(condition_code=800, max_temp=25.0, min_temp=15.0))
    await asyncio.sleep(0.3)

    assert display.weather.icon == WeatherIcon.CLEAR
    assert len(surface.calls) >= 2
    assert surface.calls[-1][1].condition_code == 800

    display.on_destroy()
    rendered = len(surface.calls)
    await asyncio.sleep(0.15)
    assert len(surface.calls) == rendered
