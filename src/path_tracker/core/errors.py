class TrackingError(Exception):
    """Base class for every failure the tracking core reports."""


class PermissionDenied(TrackingError):
    """The location permission was refused for this appearance cycle."""


class LocationUnavailable(TrackingError):
    """The device location subsystem is switched off."""


class BackgroundStartFailure(TrackingError):
    """The background location service did not acknowledge its start."""


class UnexpectedTermination(TrackingError):
    """The background location service stopped on its own while the session was active."""
