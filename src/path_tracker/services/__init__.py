from .base import LocationService
from .simulated import SimulatedLocationService

__all__ = ["LocationService", "SimulatedLocationService"]
