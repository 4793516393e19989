"""Text clock face.

A :class:`RenderSurface` that lays out the face as strings instead of
pixels: date, time, and the synchronized weather.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from pywearsync.models.display import DisplayMode, shows_weather_icon
from pywearsync.models.weather import WeatherDisplay, WeatherIcon, WeatherSnapshot

_logger = logging.getLogger(__name__)

_DATE_FORMAT = "%a, %b %d %Y"
_TIME_FORMAT_INTERACTIVE = "%H:%M:%S"
_TIME_FORMAT_AMBIENT = "%H:%M"


@dataclass(frozen=True, slots=True)
class FaceFrame:
    """One rendered frame of the face."""

    date_text: str
    time_text: str
    max_text: str
    min_text: str
    icon: WeatherIcon | None
    mode: DisplayMode

    def as_line(self) -> str:
        parts = [self.date_text, self.time_text]
        if self.max_text or self.min_text:
            parts.append(f"{self.max_text}/{self.min_text}")
        if self.icon is not None:
            parts.append(self.icon.value)
        return "  ".join(parts)


def build_frame(now: datetime, snapshot: WeatherSnapshot, mode: DisplayMode) -> FaceFrame:
    """Lay out a frame; unknown weather values are left blank."""
    weather = WeatherDisplay.from_snapshot(snapshot)
    # Seconds are not shown in ambient mode.
    ambient = mode == DisplayMode.AMBIENT
    icon: WeatherIcon | None = weather.icon if weather.has_icon and shows_weather_icon(mode) else None
    return FaceFrame(
        date_text=now.strftime(_DATE_FORMAT).upper(),
        time_text=now.strftime(_TIME_FORMAT_AMBIENT if ambient else _TIME_FORMAT_INTERACTIVE),
        max_text=weather.max_text,
        min_text=weather.min_text,
        icon=icon,
        mode=mode,
    )


class TextFace:
    """Render surface that keeps the last frame and optionally forwards it."""

    def __init__(self, on_frame: Callable[[FaceFrame], None] | None = None) -> None:
        self._on_frame = on_frame
        self.last_frame: FaceFrame | None = None

    def render(self, now: datetime, snapshot: WeatherSnapshot, mode: DisplayMode) -> None:
        frame = build_frame(now, snapshot, mode)
        self.last_frame = frame
        _logger.debug("Frame %s", frame)
        if self._on_frame is not None:
            self._on_frame(frame)
