from enum import Enum, auto


class AuthorizationState(Enum):
    """Outcome of the most recent permission request round-trip."""
    UNKNOWN = auto()  # No answer received yet in this cycle.
    DENIED = auto()
    GRANTED = auto()


class TrackingState(Enum):
    """
    Defines the distinct states of a tracking session.

    IDLE is both the initial state and the state every stop, failure or
    unexpected termination resolves to.
    """
    IDLE = auto()  # No background service running.
    STARTING = auto()  # Service start issued, waiting for its acknowledgment.
    ACTIVE = auto()  # Service acknowledged, samples are appended to the path.
    STOPPING = auto()  # Service stop issued, waiting for it to terminate.

    @property
    def is_running(self) -> bool:
        return self in (TrackingState.STARTING, TrackingState.ACTIVE)
