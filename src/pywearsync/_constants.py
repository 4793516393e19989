"""Internal constants shared across the library."""

# ------------------------------------------------------------------
# Sync protocol (must match the producer exactly)
# ------------------------------------------------------------------

WEATHER_TOPIC = "/weather"
WEATHER_NAMESPACE = "weather"

KEY_WEATHER_ID = "weatherID"
KEY_MAX_TEMP = "maxTemp"
KEY_MIN_TEMP = "minTemp"

#: Seconds to wait for the remote channel before a batch is dropped.
CONNECT_TIMEOUT_S = 30.0

# ------------------------------------------------------------------
# Display cadence
# ------------------------------------------------------------------

#: Update rate in milliseconds for interactive mode. Seconds are shown, so once a second.
INTERACTIVE_UPDATE_RATE_MS = 1000

DEFAULT_TOPIC_PREFIX = "wearsync"
