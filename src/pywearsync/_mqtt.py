"""MQTT transport for the remote state channel.

The producer publishes JSON objects on ``<prefix><path>`` topics (for
example ``wearsync/weather`` for the ``/weather`` path). The consumer side
runs a threaded paho-mqtt client and queues parsed events for the sync
handler to pull.
"""

from __future__ import annotations

import contextlib
import json
import logging
import queue
import threading
from collections.abc import Iterator
from typing import Any, cast

import paho.mqtt.client as mqtt
from pydantic import ValidationError

from pywearsync._redact import redact_for_log
from pywearsync.config import WearSyncConfig
from pywearsync.exceptions import ChannelConnectError
from pywearsync.state.events import SyncEvent

_CLOSED = object()


def path_to_topic(prefix: str, path: str) -> str:
    """``("wearsync", "/weather") -> "wearsync/weather"``."""
    return f"{prefix.rstrip('/')}/{path.lstrip('/')}"


def topic_to_path(prefix: str, topic: str) -> str | None:
    """Inverse of :func:`path_to_topic`; ``None`` for foreign topics."""
    head = prefix.rstrip("/") + "/"
    if not topic.startswith(head) or topic == head:
        return None
    return "/" + topic[len(head) :]


def decode_sync_message(prefix: str, topic: str, payload: bytes) -> SyncEvent | None:
    """Parse one MQTT message; ``None`` when it is not a sync event."""
    path = topic_to_path(prefix, topic)
    if path is None:
        return None
    data = json.loads(payload.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError("sync payload is not a JSON object")
    return SyncEvent(topic_path=path, payload=data)


class MqttChannel:
    """Threaded paho-mqtt client implementing ``RemoteStateChannel``.

    Messages are queued as they arrive; :meth:`batches` drains everything
    available into one batch, preserving arrival order.
    """

    def __init__(self, config: WearSyncConfig, *, logger: logging.Logger | None = None) -> None:
        self._config = config
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._connected = threading.Event()
        self._queue: queue.Queue[Any] = queue.Queue()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_connected(self) -> bool:
        return self._connected.is_set()

    @property
    def subscription(self) -> str:
        return path_to_topic(self._config.topic_prefix, "#")

    def start(self) -> None:
        """Start the network loop; connection completes in the background."""
        self.stop()
        self._queue = queue.Queue()
        config = self._config
        self._logger.debug(
            "MQTT channel start requested host=%s port=%s topic=%s client_id=%s",
            config.mqtt_host,
            config.mqtt_port,
            self.subscription,
            config.client_id,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=config.client_id,
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self._logger)
        if config.mqtt_username is not None:
            client.username_pw_set(config.mqtt_username, config.mqtt_password)
        if config.mqtt_tls:
            client.tls_set()

        client.on_connect = self._on_connect
        client.on_message = self._on_message
        client.on_disconnect = self._on_disconnect

        client.connect_async(config.mqtt_host, config.mqtt_port, keepalive=config.mqtt_keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop the network loop and end any :meth:`batches` iteration."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False
        self._connected.clear()

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._queue.put(_CLOSED)
            self._logger.debug("MQTT network loop stopped")

    # ------------------------------------------------------------------
    # paho callbacks (network thread)
    # ------------------------------------------------------------------

    def _on_connect(self, c: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any) -> None:
        if reason_code.value != 0:
            self._logger.warning("MQTT connect failed: %s", reason_code)
            return
        self._logger.debug("MQTT connected, subscribing topic=%s", self.subscription)
        c.subscribe(self.subscription, qos=1)
        self._connected.set()

    def _on_disconnect(self, _c: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any) -> None:
        self._connected.clear()
        if self._running:
            self._logger.debug("MQTT disconnected: %s", reason_code)

    def _on_message(self, _c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
        try:
            event = decode_sync_message(self._config.topic_prefix, msg.topic, msg.payload)
        except (UnicodeDecodeError, ValueError, ValidationError):
            self._logger.debug("MQTT payload parse failure topic=%s", msg.topic, exc_info=True)
            return
        if event is None:
            return
        self._logger.debug("Received sync event path=%s payload=%s", event.topic_path, redact_for_log(event.payload))
        self._queue.put(event)

    # ------------------------------------------------------------------
    # RemoteStateChannel
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def connect(self, timeout: float) -> Iterator[MqttChannel]:
        """Block until the broker session is up, at most ``timeout`` seconds."""
        if not self._running:
            raise ChannelConnectError("MQTT channel is not running", timeout=timeout)
        if not self._connected.wait(timeout):
            raise ChannelConnectError(
                f"MQTT broker {self._config.mqtt_host}:{self._config.mqtt_port} not reachable in {timeout}s",
                timeout=timeout,
            )
        yield self

    def batches(self) -> Iterator[list[SyncEvent]]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            batch = [item]
            while True:
                try:
                    item = self._queue.get_nowait()
                except queue.Empty:
                    break
                if item is _CLOSED:
                    yield batch
                    return
                batch.append(item)
            yield batch

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def publish(self, path: str, payload: dict[str, Any], *, timeout: float | None = None) -> None:
        """Publish a retained JSON update so late subscribers get the latest state."""
        client = self._client
        if client is None:
            raise ChannelConnectError("MQTT channel is not running")
        wait = self._config.connect_timeout if timeout is None else timeout
        if not self._connected.wait(wait):
            raise ChannelConnectError(f"MQTT broker not reachable in {wait}s", timeout=wait)
        topic = path_to_topic(self._config.topic_prefix, path)
        info = client.publish(topic, json.dumps(payload), qos=1, retain=True)
        info.wait_for_publish(wait)
        self._logger.debug("Published topic=%s payload=%s", topic, redact_for_log(payload))
