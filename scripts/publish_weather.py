#!/usr/bin/env python3
"""Publish one weather update as the producer device would.

Example::

    python scripts/publish_weather.py --weather-id 800 --max 25 --min 15
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pywearsync import ChannelConnectError, MqttChannel, WearSyncConfig  # noqa: E402
from pywearsync._constants import KEY_MAX_TEMP, KEY_MIN_TEMP, KEY_WEATHER_ID, WEATHER_TOPIC  # noqa: E402

_LOG = logging.getLogger("publish_weather")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--weather-id", type=int, required=True, help="OpenWeatherMap condition id")
    parser.add_argument("--max", dest="max_temp", type=float, required=True, help="Daily maximum temperature")
    parser.add_argument("--min", dest="min_temp", type=float, required=True, help="Daily minimum temperature")
    parser.add_argument("--host", help="MQTT broker host")
    parser.add_argument("--port", type=int, help="MQTT broker port")
    parser.add_argument("--client-id", default="pywearsync-producer", help="MQTT client id")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {"client_id": args.client_id}
    if args.host:
        overrides["mqtt_host"] = args.host
    if args.port:
        overrides["mqtt_port"] = args.port
    config = WearSyncConfig.from_env(**overrides)

    channel = MqttChannel(config)
    channel.start()
    try:
        channel.publish(
            WEATHER_TOPIC,
            {KEY_WEATHER_ID: args.weather_id, KEY_MAX_TEMP: args.max_temp, KEY_MIN_TEMP: args.min_temp},
        )
    except ChannelConnectError as exc:
        _LOG.error("Publish failed: %s", exc)
        return 1
    finally:
        channel.stop()
    _LOG.info("Published weather id=%s max=%s min=%s", args.weather_id, args.max_temp, args.min_temp)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
