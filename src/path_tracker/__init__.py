"""Location-tracking session coordinator for a map screen."""

from .core import TrackingScreen, TrackingSession, TrackingState
from .factories import TrackingApp, create_tracking_app

__all__ = ["TrackingApp", "TrackingScreen", "TrackingSession", "TrackingState", "create_tracking_app"]
