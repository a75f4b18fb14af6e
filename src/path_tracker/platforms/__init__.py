from .base import Platform
from .dummy import DummyPlatform

__all__ = ["Platform", "DummyPlatform"]
