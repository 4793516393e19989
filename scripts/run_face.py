#!/usr/bin/env python3
"""Run the text clock face against an MQTT broker.

Hosts the display on an asyncio loop and the sync handler on a worker
thread, printing one line per redraw. Ambient mode can be toggled by
sending SIGUSR1; the host minute tick is simulated while ambient.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
import threading
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pywearsync import (  # noqa: E402
    DisplayStateMachine,
    FaceFrame,
    MqttChannel,
    PersistedStateStore,
    SyncHandler,
    TextFace,
    WearSyncConfig,
)
from pywearsync.models import DisplayMode  # noqa: E402

_LOG = logging.getLogger("run_face")

_AMBIENT_TICK_S = 60.0


def _print_frame(frame: FaceFrame) -> None:
    print(frame.as_line(), flush=True)


async def _ambient_ticks(display: DisplayStateMachine) -> None:
    while True:
        await asyncio.sleep(_AMBIENT_TICK_S)
        if display.mode == DisplayMode.AMBIENT:
            display.on_time_tick()


async def _run(config: WearSyncConfig, *, start_ambient: bool) -> None:
    loop = asyncio.get_running_loop()
    store = PersistedStateStore(config.state_path)
    channel = MqttChannel(config)
    handler = SyncHandler(store, channel, connect_timeout=config.connect_timeout)
    display = DisplayStateMachine(
        store,
        TextFace(on_frame=_print_frame),
        loop=loop,
        update_rate_ms=config.update_rate_ms,
        time_zone=config.time_zone,
    )

    stop = asyncio.Event()
    sync_stop = threading.Event()
    loop.add_signal_handler(signal.SIGINT, stop.set)
    loop.add_signal_handler(signal.SIGTERM, stop.set)
    loop.add_signal_handler(
        signal.SIGUSR1,
        lambda: display.on_ambient_mode_changed(display.mode != DisplayMode.AMBIENT),
    )

    await loop.run_in_executor(None, channel.start)
    sync_thread = threading.Thread(target=handler.run, args=(sync_stop,), name="wearsync-sync", daemon=True)
    sync_thread.start()

    display.on_create()
    display.on_visibility_changed(True)
    display.on_ambient_mode_changed(start_ambient)
    ticker = asyncio.create_task(_ambient_ticks(display))
    try:
        await stop.wait()
    finally:
        ticker.cancel()
        display.on_destroy()
        sync_stop.set()
        await loop.run_in_executor(None, channel.stop)
        sync_thread.join(timeout=5.0)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", help="MQTT broker host (default: WEARSYNC_MQTT_HOST or localhost)")
    parser.add_argument("--port", type=int, help="MQTT broker port")
    parser.add_argument("--ambient", action="store_true", help="Start in ambient mode")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, object] = {}
    if args.host:
        overrides["mqtt_host"] = args.host
    if args.port:
        overrides["mqtt_port"] = args.port
    config = WearSyncConfig.from_env(**overrides)
    _LOG.info("Weather state file: %s", config.state_path)

    asyncio.run(_run(config, start_ambient=args.ambient))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
