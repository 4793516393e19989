"""Persisted weather state store.

This is the only component that holds the synchronized weather snapshot.
The sync handler is its single writer; the display reads it.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pywearsync._constants import KEY_MAX_TEMP, KEY_MIN_TEMP, KEY_WEATHER_ID, WEATHER_NAMESPACE
from pywearsync.models.weather import WeatherSnapshot

_logger = logging.getLogger(__name__)

Listener = Callable[[WeatherSnapshot], None]


class Subscription:
    """Handle returned by :meth:`PersistedStateStore.subscribe`."""

    __slots__ = ("_listener", "_store")

    def __init__(self, store: PersistedStateStore, listener: Listener) -> None:
        self._store: PersistedStateStore | None = store
        self._listener = listener

    @property
    def active(self) -> bool:
        return self._store is not None

    def cancel(self) -> None:
        store = self._store
        if store is not None:
            store.unsubscribe(self)


def _snapshot_to_namespace(snapshot: WeatherSnapshot) -> dict[str, Any]:
    return {
        WEATHER_NAMESPACE: {
            KEY_WEATHER_ID: snapshot.condition_code,
            KEY_MAX_TEMP: snapshot.max_temp,
            KEY_MIN_TEMP: snapshot.min_temp,
        }
    }


def _snapshot_from_namespace(document: Any) -> WeatherSnapshot:
    if not isinstance(document, dict):
        raise ValueError("state document is not an object")
    values = document.get(WEATHER_NAMESPACE)
    if not isinstance(values, dict):
        raise ValueError(f"state document has no {WEATHER_NAMESPACE!r} namespace")
    return WeatherSnapshot(
        condition_code=values[KEY_WEATHER_ID],
        max_temp=values[KEY_MAX_TEMP],
        min_temp=values[KEY_MIN_TEMP],
    )


class PersistedStateStore:
    """Durable holder of the last synchronized :class:`WeatherSnapshot`.

    ``path=None`` keeps state in memory only, which is what tests use.
    Otherwise every :meth:`put` is written to ``path`` as JSON before
    listeners are notified, and the file is reloaded on construction.
    """

    def __init__(self, path: Path | None = None, *, logger: logging.Logger | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._logger = logger or _logger
        self._lock = threading.Lock()
        # Held across commit and notification so listeners see puts in commit order.
        self._write_lock = threading.RLock()
        self._listeners: list[Subscription] = []
        self._snapshot = self._load()

    @property
    def path(self) -> Path | None:
        return self._path

    def _load(self) -> WeatherSnapshot:
        if self._path is None or not self._path.exists():
            return WeatherSnapshot.unknown()
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
            return _snapshot_from_namespace(document)
        except (OSError, ValueError, KeyError, ValidationError):
            self._logger.warning("Ignoring unreadable weather state at %s", self._path, exc_info=True)
            return WeatherSnapshot.unknown()

    def _write(self, snapshot: WeatherSnapshot) -> None:
        assert self._path is not None  # noqa: S101
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".weather-", suffix=".json", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(_snapshot_to_namespace(snapshot), handle)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self) -> WeatherSnapshot:
        """Return the current snapshot (the sentinel snapshot before any put)."""
        with self._lock:
            return self._snapshot

    def put(self, snapshot: WeatherSnapshot) -> None:
        """Atomically replace all fields, then notify every listener."""
        with self._write_lock:
            if self._path is not None:
                self._write(snapshot)
            with self._lock:
                self._snapshot = snapshot
                listeners = list(self._listeners)
            for subscription in listeners:
                try:
                    subscription._listener(snapshot)
                except Exception:
                    self._logger.warning("Weather state listener failed", exc_info=True)

    def subscribe(self, listener: Listener) -> Subscription:
        subscription = Subscription(self, listener)
        with self._lock:
            self._listeners.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Stop notifying ``subscription``. Unsubscribing twice is a no-op."""
        with self._lock:
            self._listeners = [cand for cand in self._listeners if cand is not subscription]
        subscription._store = None

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)
