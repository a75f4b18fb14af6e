import logging
from abc import ABC, abstractmethod
from typing import Mapping, Sequence

from ..configs import AppSettings
from ..models import Position
from ..services import LocationService

logger = logging.getLogger(__name__)


class Platform(ABC):
    """
    Abstract device platform.
    AUTHORITY on: runtime permissions, the location switch, and the
    background location service.

    Implements the `PermissionRequester`, `LocationStatusReader` and
    `SettingsPrompt` protocols so a single object can be injected for all
    three capabilities.
    """
    def __init__(self, settings: AppSettings):
        self._settings = settings

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Returns a human-readable name of the platform."""
        ...

    @abstractmethod
    async def request_permissions(self, permissions: Sequence[str]) -> Mapping[str, bool]:
        """Shows the permission dialog; maps each permission to whether it was granted."""
        ...

    @abstractmethod
    def is_location_enabled(self) -> bool:
        ...

    @abstractmethod
    def prompt_location_settings(self) -> None:
        """Asks the user to switch location on. No result is reported back."""
        ...

    @abstractmethod
    def create_service(self) -> LocationService:
        """Factory: Returns the background location service for this application."""
        ...

    def last_known_position(self) -> Position:
        """Where the map is centred before the first fix arrives."""
        lat, lon = self._settings.map.default_center
        return Position(latitude=lat, longitude=lon)

    def shutdown(self) -> None:
        """Cleanup platform resources."""
        logger.info("%s shut down.", self.platform_name)
