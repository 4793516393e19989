"""Sync handler: drains remote weather updates into the persisted store."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from contextlib import AbstractContextManager
from typing import Any, Protocol

from pywearsync._constants import CONNECT_TIMEOUT_S
from pywearsync._redact import redact_for_log
from pywearsync.exceptions import ChannelConnectError, MalformedEventError
from pywearsync.ingestion.weather import is_weather_event, snapshot_from_event
from pywearsync.state.events import SyncEvent
from pywearsync.state.store import PersistedStateStore

_logger = logging.getLogger(__name__)


class RemoteStateChannel(Protocol):
    """Inbound side of the pub/sub link to the producer device."""

    def connect(self, timeout: float) -> AbstractContextManager[Any]:
        """Acquire the channel, raising :class:`ChannelConnectError` on failure or timeout."""
        ...

    def batches(self) -> Iterator[list[SyncEvent]]:
        """Yield delivered batches in arrival order until the channel closes."""
        ...


class SyncHandler:
    """Commit weather events from a :class:`RemoteStateChannel` to the store.

    The connect step blocks for up to ``connect_timeout`` seconds, so the
    handler must run on its own thread, never on the display loop.
    """

    def __init__(
        self,
        store: PersistedStateStore,
        channel: RemoteStateChannel,
        *,
        connect_timeout: float = CONNECT_TIMEOUT_S,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._channel = channel
        self._connect_timeout = connect_timeout
        self._logger = logger or _logger

    def on_events(self, batch: Iterable[SyncEvent]) -> int:
        """Process one delivered batch; returns the number of committed events.

        If the channel cannot be acquired the whole batch is dropped and
        nothing is committed.
        """
        events = list(batch)
        try:
            with self._channel.connect(self._connect_timeout):
                return self._commit_all(events)
        except ChannelConnectError as exc:
            self._logger.debug("Dropping batch of %d sync events: %s", len(events), exc)
            return 0

    def _commit_all(self, events: list[SyncEvent]) -> int:
        committed = 0
        for event in events:
            if not is_weather_event(event):
                continue
            try:
                snapshot = snapshot_from_event(event)
            except MalformedEventError as exc:
                self._logger.debug("%s payload=%s", exc, redact_for_log(event.payload))
                continue
            try:
                self._store.put(snapshot)
            except OSError:
                self._logger.warning("Could not persist weather update, skipping event", exc_info=True)
                continue
            committed += 1
        return committed

    def run(self, stop: threading.Event | None = None) -> None:
        """Drain the channel until it closes or ``stop`` is set."""
        self._logger.debug("Sync handler started")
        for batch in self._channel.batches():
            if stop is not None and stop.is_set():
                break
            self.on_events(batch)
        self._logger.debug("Sync handler stopped")
