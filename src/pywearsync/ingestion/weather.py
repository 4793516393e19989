"""Weather ingestion helpers.

Translates accepted sync events into :class:`WeatherSnapshot` commits.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pywearsync._constants import KEY_MAX_TEMP, KEY_MIN_TEMP, KEY_WEATHER_ID, WEATHER_TOPIC
from pywearsync.exceptions import MalformedEventError
from pywearsync.models.weather import WeatherSnapshot
from pywearsync.state.events import SyncEvent


class _WeatherPayload(BaseModel):
    """Protocol-level field names as published by the producer.

    Strict: numeric strings and booleans are not coerced. Integer temperatures are accepted.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, strict=True)

    weather_id: int = Field(..., alias=KEY_WEATHER_ID)
    max_temp: float = Field(..., alias=KEY_MAX_TEMP)
    min_temp: float = Field(..., alias=KEY_MIN_TEMP)


def is_weather_event(event: SyncEvent) -> bool:
    """Exact path match; prefixes and wildcards are not accepted."""
    return event.topic_path == WEATHER_TOPIC


def snapshot_from_event(event: SyncEvent) -> WeatherSnapshot:
    """Extract all three weather fields, or raise :class:`MalformedEventError`.

    Nothing is returned for a partial payload, so a commit is all-or-nothing.
    """
    try:
        payload = _WeatherPayload.model_validate(event.payload)
        return WeatherSnapshot(
            condition_code=payload.weather_id,
            max_temp=payload.max_temp,
            min_temp=payload.min_temp,
        )
    except ValidationError as exc:
        missing = sorted(str(err["loc"][0]) for err in exc.errors() if err["loc"])
        raise MalformedEventError(
            f"Weather event rejected, bad fields: {', '.join(missing) or 'payload'}",
            topic_path=event.topic_path,
        ) from exc
