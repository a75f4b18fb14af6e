from typing import Mapping, Protocol, Sequence, runtime_checkable

from ..models import Position


@runtime_checkable
class PermissionRequester(Protocol):
    """Shows the platform permission dialog and reports what the user granted."""
    async def request_permissions(self, permissions: Sequence[str]) -> Mapping[str, bool]: ...


@runtime_checkable
class LocationStatusReader(Protocol):
    """Point-in-time read of the platform's location-service switch."""
    def is_location_enabled(self) -> bool: ...


@runtime_checkable
class SettingsPrompt(Protocol):
    """Fire-and-forget prompt asking the user to switch location on."""
    def prompt_location_settings(self) -> None: ...


@runtime_checkable
class MapView(Protocol):
    """
    Defines the methods required for any surface that renders the tracking map.
    Whether it's a widget toolkit, a web page or a console, it must support these calls.
    """
    def set_visible(self, visible: bool) -> None: ...

    def set_start_enabled(self, enabled: bool) -> None: ...

    def center_on(self, position: Position, zoom: float) -> None: ...

    def set_path(self, points: Sequence[Position]) -> None: ...

    def set_follow(self, enabled: bool) -> None: ...

    def set_overlays_enabled(self, enabled: bool) -> None: ...

    def show_message(self, text: str) -> None: ...
