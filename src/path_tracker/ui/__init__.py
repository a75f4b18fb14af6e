from .console import ConsoleMapView

__all__ = ["ConsoleMapView"]
