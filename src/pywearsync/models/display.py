"""Display mode, visibility and lifecycle enums."""

from __future__ import annotations

from enum import StrEnum


class DisplayMode(StrEnum):
    INTERACTIVE = "interactive"
    AMBIENT = "ambient"


class Visibility(StrEnum):
    VISIBLE = "visible"
    HIDDEN = "hidden"


class LifecycleState(StrEnum):
    """Lifecycle of a :class:`pywearsync.display.DisplayStateMachine`.

    ``ACTIVE`` means visible, in either display mode.
    """

    CREATED = "created"
    HIDDEN = "hidden"
    ACTIVE = "active"
    DESTROYED = "destroyed"


def shows_weather_icon(mode: DisplayMode) -> bool:
    """The weather icon is drawn only in interactive mode."""
    return mode == DisplayMode.INTERACTIVE
