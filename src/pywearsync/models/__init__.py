"""Data models for synchronized weather and display state."""

from pywearsync.models.display import DisplayMode, LifecycleState, Visibility, shows_weather_icon
from pywearsync.models.weather import (
    WeatherDisplay,
    WeatherIcon,
    WeatherSnapshot,
    format_temperature,
    icon_for_condition,
)

__all__ = [
    "DisplayMode",
    "LifecycleState",
    "Visibility",
    "WeatherDisplay",
    "WeatherIcon",
    "WeatherSnapshot",
    "format_temperature",
    "icon_for_condition",
    "shows_weather_icon",
]
