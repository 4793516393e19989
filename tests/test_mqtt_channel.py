from __future__ import annotations

import json
from dataclasses import dataclass

import pytest

from pywearsync._mqtt import MqttChannel, decode_sync_message, path_to_topic, topic_to_path
from pywearsync.config import WearSyncConfig
from pywearsync.exceptions import ChannelConnectError
from pywearsync.state.events import SyncEvent


@dataclass
class _Message:
    topic: str
    payload: bytes


def _payload(**fields: object) -> bytes:
    return json.dumps(fields).encode("utf-8")


def test_topic_mapping_round_trips_paths() -> None:
    assert path_to_topic("wearsync", "/weather") == "wearsync/weather"
    assert path_to_topic("home/wear/", "/weather") == "home/wear/weather"
    assert topic_to_path("wearsync", "wearsync/weather") == "/weather"
    assert topic_to_path("wearsync", "other/weather") is None
    assert topic_to_path("wearsync", "wearsync/") is None


def test_decode_sync_message_builds_event() -> None:
    event = decode_sync_message("wearsync", "wearsync/weather", _payload(weatherID=800, maxTemp=25.0, minTemp=15.0))

    assert event == SyncEvent(topic_path="/weather", payload={"weatherID": 800, "maxTemp": 25.0, "minTemp": 15.0})


def test_decode_sync_message_rejects_non_object_payload() -> None:
    with pytest.raises(ValueError):
        decode_sync_message("wearsync", "wearsync/weather", b"[1, 2, 3]")


def _deliver(channel: MqttChannel, topic: str, payload: bytes) -> None:
    channel._on_message(None, None, _Message(topic, payload))  # type: ignore[arg-type]  # noqa: SLF001


def test_messages_are_drained_into_batches_in_arrival_order() -> None:
    channel = MqttChannel(WearSyncConfig())
    _deliver(channel, "wearsync/weather", _payload(weatherID=500))
    _deliver(channel, "wearsync/weather", b"not json")
    _deliver(channel, "elsewhere/weather", _payload(weatherID=1))
    _deliver(channel, "wearsync/forecast", _payload(days=3))

    batches = channel.batches()
    batch = next(batches)

    assert [event.topic_path for event in batch] == ["/weather", "/forecast"]
    assert batch[0].payload == {"weatherID": 500}


def test_connect_requires_running_channel() -> None:
    channel = MqttChannel(WearSyncConfig())

    with pytest.raises(ChannelConnectError):
        with channel.connect(0.01):
            pass


def test_connect_times_out_when_broker_never_answers() -> None:
    channel = MqttChannel(WearSyncConfig())
    channel._running = True  # noqa: SLF001

    with pytest.raises(ChannelConnectError) as excinfo:
        with channel.connect(0.01):
            pass

    assert excinfo.value.timeout == 0.01


def test_connect_yields_once_broker_session_is_up() -> None:
    channel = MqttChannel(WearSyncConfig())
    channel._running = True  # noqa: SLF001
    channel._connected.set()  # noqa: SLF001

    with channel.connect(0.01) as connected:
        assert connected is channel
