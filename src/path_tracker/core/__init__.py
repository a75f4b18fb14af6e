from .errors import (
    BackgroundStartFailure,
    LocationUnavailable,
    PermissionDenied,
    TrackingError,
    UnexpectedTermination,
)
from .events import Publisher, Subscription
from .manager import TrackingScreen
from .path import PathAccumulator
from .protocols import LocationStatusReader, MapView, PermissionRequester, SettingsPrompt
from .readiness import (
    AuthorizationGate,
    LocationAvailability,
    Readiness,
    ReadinessAggregator,
    SurfaceReadiness,
)
from .session import TrackingSession
from .state import AuthorizationState, TrackingState

__all__ = [
    "AuthorizationGate",
    "AuthorizationState",
    "BackgroundStartFailure",
    "LocationAvailability",
    "LocationStatusReader",
    "LocationUnavailable",
    "MapView",
    "PathAccumulator",
    "PermissionDenied",
    "PermissionRequester",
    "Publisher",
    "Readiness",
    "ReadinessAggregator",
    "SettingsPrompt",
    "Subscription",
    "SurfaceReadiness",
    "TrackingError",
    "TrackingScreen",
    "TrackingSession",
    "TrackingState",
    "UnexpectedTermination",
]
