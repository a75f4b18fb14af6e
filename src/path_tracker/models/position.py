import time
from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class Position:
    """
    A standardized, immutable container for a single location sample.

    This object is the canonical representation of a fix as it flows from the
    background service into the session path and out to the renderer.
    """
    latitude: float
    longitude: float
    timestamp: float = field(default_factory=time.time)

    def as_tuple(self) -> tuple[float, float]:
        return self.latitude, self.longitude
