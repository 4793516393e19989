"""pywearsync - weather sync and clock face refresh for a companion display."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pywearsync")
except PackageNotFoundError:
    __version__ = "0+local"
from pywearsync._mqtt import MqttChannel
from pywearsync.config import WearSyncConfig
from pywearsync.display import DisplayStateMachine, RenderSurface
from pywearsync.exceptions import (
    ChannelConnectError,
    DisplayLifecycleError,
    MalformedEventError,
    WearSyncConfigError,
    WearSyncError,
)
from pywearsync.face import FaceFrame, TextFace
from pywearsync.models import (
    DisplayMode,
    LifecycleState,
    Visibility,
    WeatherDisplay,
    WeatherIcon,
    WeatherSnapshot,
)
from pywearsync.state.events import SyncEvent
from pywearsync.state.store import PersistedStateStore, Subscription
from pywearsync.sync import RemoteStateChannel, SyncHandler

__all__ = [
    "__version__",
    "ChannelConnectError",
    "DisplayLifecycleError",
    "DisplayMode",
    "DisplayStateMachine",
    "FaceFrame",
    "LifecycleState",
    "MalformedEventError",
    "MqttChannel",
    "PersistedStateStore",
    "RemoteStateChannel",
    "RenderSurface",
    "Subscription",
    "SyncEvent",
    "SyncHandler",
    "TextFace",
    "Visibility",
    "WearSyncConfig",
    "WearSyncConfigError",
    "WearSyncError",
    "WeatherDisplay",
    "WeatherIcon",
    "WeatherSnapshot",
]
