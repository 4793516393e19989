from __future__ import annotations

from datetime import UTC, datetime

from pywearsync.face import TextFace, build_frame
from pywearsync.models.display import DisplayMode
from pywearsync.models.weather import WeatherIcon, WeatherSnapshot

_NOW = datetime(2026, 1, 3, 7, 5, 9, tzinfo=UTC)
_CLEAR = WeatherSnapshot(condition_code=800, max_temp=25.0, min_temp=15.0)


def test_interactive_frame_shows_seconds_and_icon() -> None:
    frame = build_frame(_NOW, _CLEAR, DisplayMode.INTERACTIVE)

    assert frame.date_text == "SAT, JAN 03 2026"
    assert frame.time_text == "07:05:09"
    assert frame.max_text == "25°"
    assert frame.min_text == "15°"
    assert frame.icon == WeatherIcon.CLEAR
    assert frame.as_line() == "SAT, JAN 03 2026  07:05:09  25°/15°  clear"


def test_ambient_frame_drops_seconds_and_icon() -> None:
    frame = build_frame(_NOW, _CLEAR, DisplayMode.AMBIENT)

    assert frame.time_text == "07:05"
    assert frame.icon is None
    assert frame.max_text == "25°"


def test_sentinel_snapshot_omits_weather() -> None:
    frame = build_frame(_NOW, WeatherSnapshot.unknown(), DisplayMode.INTERACTIVE)

    assert frame.max_text == ""
    assert frame.min_text == ""
    assert frame.icon is None
    assert frame.as_line() == "SAT, JAN 03 2026  07:05:09"


def test_text_face_keeps_and_forwards_last_frame() -> None:
    frames = []
    face = TextFace(on_frame=frames.append)

    face.render(_NOW, _CLEAR, DisplayMode.INTERACTIVE)

    assert face.last_frame is not None
    assert frames == [face.last_frame]
