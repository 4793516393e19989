from __future__ import annotations

import json
import math
import threading
from pathlib import Path

import pytest

from pywearsync.models.weather import WeatherSnapshot
from pywearsync.state.store import PersistedStateStore


def test_get_before_put_returns_sentinels() -> None:
    snapshot = PersistedStateStore().get()

    assert snapshot == WeatherSnapshot.unknown()
    assert snapshot.condition_code == -1
    assert snapshot.max_temp == math.inf
    assert snapshot.min_temp == -math.inf
    assert not snapshot.has_temperatures
    assert not snapshot.has_condition


@pytest.mark.parametrize(
    "snapshot",
    [
        WeatherSnapshot(condition_code=800, max_temp=25.0, min_temp=15.0),
        WeatherSnapshot(condition_code=602, max_temp=-1.5, min_temp=-12.25),
        WeatherSnapshot.unknown(),
    ],
)
def test_put_then_get_round_trips(snapshot: WeatherSnapshot, tmp_path: Path) -> None:
    memory = PersistedStateStore()
    memory.put(snapshot)
    assert memory.get() == snapshot

    path = tmp_path / "weather.json"
    PersistedStateStore(path).put(snapshot)
    assert PersistedStateStore(path).get() == snapshot


def test_persisted_file_uses_weather_namespace(tmp_path: Path) -> None:
    path = tmp_path / "state" / "weather.json"
    PersistedStateStore(path).put(WeatherSnapshot(condition_code=801, max_temp=20.5, min_temp=10.0))

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document == {"weather": {"weatherID": 801, "maxTemp": 20.5, "minTemp": 10.0}}
    assert list(path.parent.iterdir()) == [path]


def test_corrupt_state_file_falls_back_to_sentinels(tmp_path: Path) -> None:
    path = tmp_path / "weather.json"
    path.write_text('{"weather": {"weatherID": 800}}', encoding="utf-8")
    assert PersistedStateStore(path).get() == WeatherSnapshot.unknown()

    path.write_text("not json", encoding="utf-8")
    assert PersistedStateStore(path).get() == WeatherSnapshot.unknown()


def test_put_notifies_listeners_before_returning_in_commit_order() -> None:
    store = PersistedStateStore()
    seen: list[int] = []
    store.subscribe(lambda snap: seen.append(snap.condition_code))

    store.put(WeatherSnapshot(condition_code=500, max_temp=1.0, min_temp=0.0))
    assert seen == [500]
    store.put(WeatherSnapshot(condition_code=800, max_temp=1.0, min_temp=0.0))
    assert seen == [500, 800]


def test_unsubscribe_stops_notifications_and_is_idempotent() -> None:
    store = PersistedStateStore()
    seen: list[WeatherSnapshot] = []
    subscription = store.subscribe(seen.append)

    subscription.cancel()
    store.unsubscribe(subscription)
    store.put(WeatherSnapshot(condition_code=800, max_temp=1.0, min_temp=0.0))

    assert seen == []
    assert not subscription.active
    assert store.listener_count == 0


def test_failing_listener_does_not_block_others_or_undo_commit() -> None:
    store = PersistedStateStore()
    seen: list[int] = []

    def _boom(_snapshot: WeatherSnapshot) -> None:
        raise RuntimeError("listener failure")

    store.subscribe(_boom)
    store.subscribe(lambda snap: seen.append(snap.condition_code))
    store.put(WeatherSnapshot(condition_code=300, max_temp=1.0, min_temp=0.0))

    assert seen == [300]
    assert store.get().condition_code == 300


def test_readers_never_observe_torn_snapshots() -> None:
    store = PersistedStateStore()
    stop = threading.Event()
    torn: list[WeatherSnapshot] = []

    def _reader() -> None:
        while not stop.is_set():
            snap = store.get()
            if snap.has_condition and snap.max_temp - snap.min_temp != snap.condition_code:
                torn.append(snap)

    readers = [threading.Thread(target=_reader) for _ in range(3)]
    for reader in readers:
        reader.start()
    for code in range(1, 500):
        store.put(WeatherSnapshot(condition_code=code, max_temp=float(code * 2), min_temp=float(code)))
    stop.set()
    for reader in readers:
        reader.join()

    assert torn == []
    assert store.get().condition_code == 499


def test_state_file_with_out_of_range_infinity_falls_back_to_sentinels(tmp_path: Path) -> None:
    path = tmp_path / "weather.json"
    path.write_text('{"weather": {"weatherID": 800, "maxTemp": 25.0, "minTemp": Infinity}}', encoding="utf-8")

    assert PersistedStateStore(path).get() == WeatherSnapshot.unknown()


def test_failed_write_leaves_snapshot_and_listeners_untouched(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = PersistedStateStore(blocker / "weather.json")
    seen: list[WeatherSnapshot] = []
    store.subscribe(seen.append)

    with pytest.raises(OSError):
        store.put(WeatherSnapshot(condition_code=800, max_temp=25.0, min_temp=15.0))

    assert store.get() == WeatherSnapshot.unknown()
    assert seen == []
