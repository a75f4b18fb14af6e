from .app import (
    AppSettings,
    MapSettings,
    PermissionSettings,
    SessionSettings,
    SimulationSettings,
    FINE_LOCATION,
    POST_NOTIFICATIONS,
)
from .utils import LoggingConfig

__all__ = [
    "AppSettings",
    "MapSettings",
    "PermissionSettings",
    "SessionSettings",
    "SimulationSettings",
    "LoggingConfig",
    "FINE_LOCATION",
    "POST_NOTIFICATIONS",
]
