"""Configuration for pywearsync."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pywearsync._constants import CONNECT_TIMEOUT_S, DEFAULT_TOPIC_PREFIX, INTERACTIVE_UPDATE_RATE_MS
from pywearsync.exceptions import WearSyncConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(value)
    except ValueError as exc:
        raise WearSyncConfigError(f"{env_key} must be a {kind.__name__}, got {value!r}") from exc


def _default_state_dir() -> Path:
    return Path.home() / ".pywearsync"


@dataclasses.dataclass(frozen=True)
class WearSyncConfig:
    """Runtime configuration for the sync channel and the display.

    Parameters
    ----------
    mqtt_host : str
        Broker host carrying the producer's weather updates.
    mqtt_port : int
        Broker port.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    mqtt_tls : bool
        Connect with TLS using the system trust store.
    mqtt_username, mqtt_password : str or None
        Optional broker credentials.
    client_id : str
        MQTT client identifier.
    topic_prefix : str
        Prefix mapping sync paths onto MQTT topics
        (``/weather`` is carried on ``<prefix>/weather``).
    connect_timeout : float
        Seconds to wait for the channel before dropping a batch.
    update_rate_ms : int
        Interactive redraw interval.
    state_dir : Path
        Directory holding the persisted weather state.
    time_zone : str or None
        IANA zone for the clock. ``None`` follows the host's local zone.
    """

    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    mqtt_keepalive: int = 60
    mqtt_tls: bool = False
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    client_id: str = "pywearsync"
    topic_prefix: str = DEFAULT_TOPIC_PREFIX
    connect_timeout: float = CONNECT_TIMEOUT_S
    update_rate_ms: int = INTERACTIVE_UPDATE_RATE_MS
    state_dir: Path = dataclasses.field(default_factory=_default_state_dir)
    time_zone: str | None = None

    def __post_init__(self) -> None:
        if self.update_rate_ms <= 0:
            raise WearSyncConfigError(f"update_rate_ms must be positive, got {self.update_rate_ms}")
        if self.connect_timeout <= 0:
            raise WearSyncConfigError(f"connect_timeout must be positive, got {self.connect_timeout}")

    @property
    def state_path(self) -> Path:
        """File backing the persisted weather namespace."""
        return Path(self.state_dir) / "weather.json"

    @classmethod
    def from_env(cls, **overrides: Any) -> WearSyncConfig:
        """Create configuration from ``WEARSYNC_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "WEARSYNC_MQTT_HOST": "mqtt_host",
            "WEARSYNC_MQTT_USERNAME": "mqtt_username",
            "WEARSYNC_MQTT_PASSWORD": "mqtt_password",
            "WEARSYNC_CLIENT_ID": "client_id",
            "WEARSYNC_TOPIC_PREFIX": "topic_prefix",
            "WEARSYNC_TIME_ZONE": "time_zone",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "WEARSYNC_MQTT_PORT": ("mqtt_port", int),
            "WEARSYNC_MQTT_KEEPALIVE": ("mqtt_keepalive", int),
            "WEARSYNC_CONNECT_TIMEOUT": ("connect_timeout", float),
            "WEARSYNC_UPDATE_RATE_MS": ("update_rate_ms", int),
        }
        for env_key, (field_name, kind) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, kind)

        if "mqtt_tls" not in overrides:
            config_kwargs["mqtt_tls"] = _env_bool(env.get("WEARSYNC_MQTT_TLS"), False)

        state_dir = env.get("WEARSYNC_STATE_DIR")
        if state_dir is not None and "state_dir" not in overrides:
            config_kwargs["state_dir"] = Path(state_dir).expanduser()

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
