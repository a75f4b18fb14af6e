import asyncio
import logging
from typing import Mapping, Sequence

from .base import Platform
from ..configs import AppSettings
from ..services import SimulatedLocationService

logger = logging.getLogger(__name__)

class DummyPlatform(Platform):
    """Simulated device: scripted permission answers and a toggleable location switch."""

    def __init__(self, settings: AppSettings):
        super().__init__(settings)
        sim = settings.simulation
        self.grant_permissions: bool = sim.grant_permissions
        self._location_enabled: bool = sim.location_enabled
        self.permission_requests: list[list[str]] = []
        self.settings_prompts: int = 0

    @property
    def platform_name(self) -> str:
        return "DUMMY-PLATFORM"

    async def request_permissions(self, permissions: Sequence[str]) -> Mapping[str, bool]:
        self.permission_requests.append(list(permissions))
        await asyncio.sleep(self._settings.simulation.permission_delay_s)  # Simulate the user reading the dialog
        return {permission: self.grant_permissions for permission in permissions}

    def is_location_enabled(self) -> bool:
        return self._location_enabled

    def set_location_enabled(self, enabled: bool) -> None:
        """Simulates the user flipping the location switch."""
        logger.info("Simulated location switch turned %s.", "on" if enabled else "off")
        self._location_enabled = enabled

    def prompt_location_settings(self) -> None:
        self.settings_prompts += 1
        logger.warning("Location is off; the user would now be sent to the location settings.")

    def create_service(self) -> SimulatedLocationService:
        sim = self._settings.simulation
        return SimulatedLocationService(
            self._settings.map.default_center,
            frequency=sim.frequency_hz,
            radius=sim.radius_deg,
            speed=sim.speed,
            startup_delay=sim.startup_delay_s,
        )
