"""Display refresh state machine.

Owns visibility, ambient mode and the interactive redraw timer, and decides
when the :class:`RenderSurface` draws. All public callbacks are expected on
a single thread (the loop thread); store notifications coming from the sync
thread are marshalled onto it.
"""

from __future__ import annotations

import logging
import time
import weakref
from collections.abc import Callable
from datetime import datetime, tzinfo
from typing import Any, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pywearsync._constants import INTERACTIVE_UPDATE_RATE_MS
from pywearsync.exceptions import DisplayLifecycleError
from pywearsync.models.display import DisplayMode, LifecycleState, Visibility, shows_weather_icon
from pywearsync.models.weather import WeatherDisplay, WeatherSnapshot
from pywearsync.state.store import PersistedStateStore, Subscription

_logger = logging.getLogger(__name__)


class RenderSurface(Protocol):
    """Draws one frame. Must tolerate sentinel values in ``snapshot``."""

    def render(self, now: datetime, snapshot: WeatherSnapshot, mode: DisplayMode) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class DisplayLoop(Protocol):
    """The subset of :class:`asyncio.AbstractEventLoop` the display needs."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...

    def call_soon_threadsafe(self, callback: Callable[..., Any], *args: Any) -> Any: ...


class _WeakDispatch:
    """Forward a call to a display method without keeping the display alive.

    Once the display is collected the call is silently dropped.
    """

    __slots__ = ("_ref", "_method")

    def __init__(self, display: DisplayStateMachine, method: str) -> None:
        self._ref = weakref.ref(display)
        self._method = method

    def __call__(self, *args: Any) -> None:
        display = self._ref()
        if display is not None:
            getattr(display, self._method)(*args)


def _local_time_zone() -> tzinfo:
    zone = datetime.now().astimezone().tzinfo
    assert zone is not None  # noqa: S101
    return zone


class DisplayStateMachine:
    """Decides when the clock face is redrawn.

    The interactive timer runs only while visible and not in ambient mode,
    firing on whole-interval boundaries of the wall clock. In ambient mode
    the host is expected to call :meth:`on_time_tick` (about once a minute).
    """

    def __init__(
        self,
        store: PersistedStateStore,
        surface: RenderSurface,
        *,
        loop: DisplayLoop,
        clock: Callable[[], float] = time.time,
        update_rate_ms: int = INTERACTIVE_UPDATE_RATE_MS,
        time_zone: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._surface = surface
        self._loop = loop
        self._clock = clock
        self._update_rate_ms = update_rate_ms
        self._time_zone_name = time_zone
        self._logger = logger or _logger

        self._state = LifecycleState.CREATED
        self._mode = DisplayMode.INTERACTIVE
        self._visibility = Visibility.HIDDEN
        self._tz = self._resolve_time_zone()
        self._listening_for_time_zone = False
        self._weather = WeatherDisplay()
        self._subscription: Subscription | None = None
        self._tick_handle: TimerHandle | None = None
        self.redraw_count = 0

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def mode(self) -> DisplayMode:
        return self._mode

    @property
    def visibility(self) -> Visibility:
        return self._visibility

    @property
    def time_zone(self) -> tzinfo:
        return self._tz

    @property
    def weather(self) -> WeatherDisplay:
        """Display fields derived from the last store notification.

        Host-facing view only. The surface derives the same fields from the
        snapshot passed to :meth:`RenderSurface.render`.
        """
        return self._weather

    @property
    def weather_icon_visible(self) -> bool:
        return shows_weather_icon(self._mode)

    @property
    def timer_active(self) -> bool:
        """Whether the interactive timer should be running."""
        return self._visibility == Visibility.VISIBLE and self._mode == DisplayMode.INTERACTIVE

    @property
    def tick_pending(self) -> bool:
        return self._tick_handle is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _require_alive(self, callback: str) -> None:
        if self._state == LifecycleState.CREATED:
            raise DisplayLifecycleError(f"{callback} delivered before on_create")
        if self._state == LifecycleState.DESTROYED:
            raise DisplayLifecycleError(f"{callback} delivered after on_destroy")

    def on_create(self) -> None:
        if self._state != LifecycleState.CREATED:
            raise DisplayLifecycleError(f"on_create delivered in state {self._state}")

        self._mode = DisplayMode.INTERACTIVE
        self._visibility = Visibility.HIDDEN
        self._state = LifecycleState.HIDDEN
        self._subscription = self._store.subscribe(_WeakDispatch(self, "_on_store_changed"))
        self._update_weather(self._store.get())
        self._logger.debug("Display created")

    def on_destroy(self) -> None:
        self._require_alive("on_destroy")
        if self._subscription is not None:
            self._store.unsubscribe(self._subscription)
            self._subscription = None
        self._cancel_tick()
        self._listening_for_time_zone = False
        self._state = LifecycleState.DESTROYED
        self._logger.debug("Display destroyed after %d redraws", self.redraw_count)

    # ------------------------------------------------------------------
    # Host callbacks
    # ------------------------------------------------------------------

    def on_visibility_changed(self, visible: bool) -> None:
        self._require_alive("on_visibility_changed")
        if visible:
            self._visibility = Visibility.VISIBLE
            self._state = LifecycleState.ACTIVE
            self._listening_for_time_zone = True
            # The zone may have changed while hidden.
            self._tz = self._resolve_time_zone()
        else:
            self._visibility = Visibility.HIDDEN
            self._state = LifecycleState.HIDDEN
            self._listening_for_time_zone = False
        self._logger.debug("Display visibility=%s mode=%s", self._visibility, self._mode)
        self.update_timer()

    def on_ambient_mode_changed(self, in_ambient: bool) -> None:
        self._require_alive("on_ambient_mode_changed")
        mode = DisplayMode.AMBIENT if in_ambient else DisplayMode.INTERACTIVE
        if mode != self._mode:
            self._mode = mode
            self._logger.debug("Display mode=%s", mode)
            self.request_redraw()
        self.update_timer()

    def on_time_zone_changed(self, name: str) -> None:
        """Apply a host time zone change; ignored while hidden."""
        self._require_alive("on_time_zone_changed")
        if not self._listening_for_time_zone:
            return
        try:
            self._tz = ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            self._logger.warning("Ignoring unknown time zone %r", name)

    def on_time_tick(self) -> None:
        """Host tick, delivered about once a minute in every mode."""
        self._require_alive("on_time_tick")
        self.request_redraw()

    def on_change_notification(self, snapshot: WeatherSnapshot) -> None:
        """Recompute derived weather fields; the next redraw picks them up."""
        self._require_alive("on_change_notification")
        self._update_weather(snapshot)

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def update_timer(self) -> None:
        """Start the tick timer if it should run, stop it otherwise."""
        self._require_alive("update_timer")
        self._cancel_tick()
        if self.timer_active:
            self._schedule_tick()

    def _next_tick_delay_ms(self) -> int:
        now_ms = int(self._clock() * 1000)
        return self._update_rate_ms - (now_ms % self._update_rate_ms)

    def _schedule_tick(self) -> None:
        delay_ms = self._next_tick_delay_ms()
        self._tick_handle = self._loop.call_later(delay_ms / 1000.0, _WeakDispatch(self, "_handle_tick"))

    def _cancel_tick(self) -> None:
        handle = self._tick_handle
        self._tick_handle = None
        if handle is not None:
            handle.cancel()

    def _handle_tick(self) -> None:
        if self._state == LifecycleState.DESTROYED:
            return
        self._tick_handle = None
        self.request_redraw()
        if self.timer_active:
            self._schedule_tick()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=self._tz)

    def request_redraw(self) -> None:
        """Render one frame now. Failures wait for the next tick."""
        self._require_alive("request_redraw")
        self.redraw_count += 1
        try:
            self._surface.render(self.now(), self._store.get(), self._mode)
        except Exception:
            self._logger.warning("Render failed", exc_info=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_time_zone(self) -> tzinfo:
        if self._time_zone_name:
            try:
                return ZoneInfo(self._time_zone_name)
            except (ZoneInfoNotFoundError, ValueError):
                self._logger.warning("Unknown time zone %r, using local zone", self._time_zone_name)
        return _local_time_zone()

    def _update_weather(self, snapshot: WeatherSnapshot) -> None:
        self._weather = WeatherDisplay.from_snapshot(snapshot)

    def _on_store_changed(self, snapshot: WeatherSnapshot) -> None:
        # Runs on the writer's thread.
        self._loop.call_soon_threadsafe(_WeakDispatch(self, "_deliver_change"), snapshot)

    def _deliver_change(self, snapshot: WeatherSnapshot) -> None:
        # Deliveries queued before on_destroy are dropped.
        if self._state == LifecycleState.DESTROYED:
            return
        self._update_weather(snapshot)
