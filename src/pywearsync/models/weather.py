"""Weather snapshot and the display fields derived from it."""

from __future__ import annotations

import math
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

UNKNOWN_CONDITION = -1
UNKNOWN_MAX_TEMP = math.inf
UNKNOWN_MIN_TEMP = -math.inf


def _finite_or_sentinel(value: float, sentinel: float) -> float:
    # Only the bound's own infinity means "unknown"; NaN and the opposite infinity are invalid.
    if value != sentinel and not math.isfinite(value):
        raise ValueError(f"temperature must be finite or {sentinel}, got {value}")
    return value


class WeatherSnapshot(BaseModel):
    """The full synchronized weather state.

    All three fields are replaced together; the model is frozen so a reader
    holding a snapshot never sees a mix of old and new values.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    condition_code: int = UNKNOWN_CONDITION
    """OpenWeatherMap condition id, ``-1`` when unknown."""

    max_temp: float = UNKNOWN_MAX_TEMP
    """Daily maximum, ``+inf`` when unknown."""

    min_temp: float = UNKNOWN_MIN_TEMP
    """Daily minimum, ``-inf`` when unknown."""

    @field_validator("max_temp")
    @classmethod
    def _check_max_temp(cls, value: float) -> float:
        return _finite_or_sentinel(value, UNKNOWN_MAX_TEMP)

    @field_validator("min_temp")
    @classmethod
    def _check_min_temp(cls, value: float) -> float:
        return _finite_or_sentinel(value, UNKNOWN_MIN_TEMP)

    @classmethod
    def unknown(cls) -> WeatherSnapshot:
        """Sentinel snapshot used before the first sync."""
        return cls()

    @property
    def has_condition(self) -> bool:
        return self.condition_code != UNKNOWN_CONDITION

    @property
    def has_temperatures(self) -> bool:
        """Whether both bounds carry real values."""
        return math.isfinite(self.max_temp) and math.isfinite(self.min_temp)


class WeatherIcon(StrEnum):
    STORM = "storm"
    LIGHT_RAIN = "light_rain"
    RAIN = "rain"
    SNOW = "snow"
    FOG = "fog"
    CLEAR = "clear"
    LIGHT_CLOUDS = "light_clouds"
    CLOUDS = "clouds"
    NONE = "none"


# Inclusive condition id ranges, first match wins.
# https://openweathermap.org/weather-conditions
_ICON_RANGES: tuple[tuple[int, int, WeatherIcon], ...] = (
    (200, 232, WeatherIcon.STORM),
    (300, 321, WeatherIcon.LIGHT_RAIN),
    (500, 504, WeatherIcon.RAIN),
    (511, 511, WeatherIcon.SNOW),
    (520, 531, WeatherIcon.RAIN),
    (600, 622, WeatherIcon.SNOW),
    (701, 761, WeatherIcon.FOG),
    (762, 781, WeatherIcon.STORM),
    (800, 800, WeatherIcon.CLEAR),
    (801, 801, WeatherIcon.LIGHT_CLOUDS),
    (802, 804, WeatherIcon.CLOUDS),
)


def icon_for_condition(condition_code: int) -> WeatherIcon:
    """Map a condition id to an icon; ``NONE`` when nothing matches."""
    for low, high, icon in _ICON_RANGES:
        if low <= condition_code <= high:
            return icon
    return WeatherIcon.NONE


def format_temperature(value: float) -> str:
    """Whole degrees, truncated toward zero: ``25.9 -> "25°"``."""
    return f"{int(value)}°"


class WeatherDisplay(BaseModel):
    """Display fields derived from a :class:`WeatherSnapshot`."""

    model_config = ConfigDict(frozen=True)

    max_text: str = ""
    min_text: str = ""
    icon: WeatherIcon = WeatherIcon.NONE
    condition_known: bool = False
    """``False`` for the unknown sentinel; ``icon`` alone cannot tell it from an unmapped id."""

    @classmethod
    def from_snapshot(cls, snapshot: WeatherSnapshot) -> WeatherDisplay:
        max_text = min_text = ""
        if snapshot.has_temperatures:
            max_text = format_temperature(snapshot.max_temp)
            min_text = format_temperature(snapshot.min_temp)
        return cls(
            max_text=max_text,
            min_text=min_text,
            icon=icon_for_condition(snapshot.condition_code) if snapshot.has_condition else WeatherIcon.NONE,
            condition_known=snapshot.has_condition,
        )

    @property
    def has_icon(self) -> bool:
        return self.icon != WeatherIcon.NONE


__all__ = [
    "UNKNOWN_CONDITION",
    "UNKNOWN_MAX_TEMP",
    "UNKNOWN_MIN_TEMP",
    "WeatherDisplay",
    "WeatherIcon",
    "WeatherSnapshot",
    "format_temperature",
    "icon_for_condition",
]
