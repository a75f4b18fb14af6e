import asyncio
import logging
import math
import time

from path_tracker.models.position import Position
from .base import LocationService

logger = logging.getLogger(__name__)


class SimulatedLocationService(LocationService):
    """
    A LocationService that simulates a device walking in a circle.

    Useful for developing and testing the session and the renderer without a
    real positioning provider. Fixes are emitted at a fixed frequency after a
    simulated acquisition delay.
    """

    def __init__(
        self,
        center: tuple[float, float],
        *,
        frequency: float = 1.0,
        radius: float = 0.001,
        speed: float = 0.01,
        startup_delay: float = 0.0,
    ):
        """
        Initializes the SimulatedLocationService.

        Args:
            center: The (lat, lon) centre of the circular path.
            frequency: The frequency in Hz to emit positions.
            radius: The radius of the circle, in degrees.
            speed: Revolutions per second along the circle.
            startup_delay: Seconds before the first fix is available.
        """
        super().__init__()
        if frequency <= 0:
            raise ValueError("Frequency must be positive.")

        self._center_lat, self._center_lon = center
        self._interval_s = 1.0 / frequency
        self._radius = radius
        self._speed = speed
        self._startup_delay = startup_delay

    def position_at(self, elapsed: float) -> Position:
        angle = elapsed * self._speed * 2 * math.pi
        # Stretch longitude so the circle stays round away from the equator.
        lon_scale = max(math.cos(math.radians(self._center_lat)), 1e-6)
        return Position(
            latitude=self._center_lat + self._radius * math.sin(angle),
            longitude=self._center_lon + self._radius * math.cos(angle) / lon_scale,
            timestamp=time.time(),
        )

    async def run(self) -> None:
        if self._startup_delay:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._startup_delay)
                logger.info("Stopped while acquiring the first fix.")
                return
            except asyncio.TimeoutError:
                pass

        self._mark_ready()
        start_time = time.monotonic()
        frame_counter = 0

        logger.info("Simulated location stream live at %.2f Hz.", 1.0 / self._interval_s)
        try:
            while not self._stop_event.is_set():
                target_time = start_time + (frame_counter * self._interval_s)
                self._emit(self.position_at(time.monotonic() - start_time))

                sleep_duration = target_time + self._interval_s - time.monotonic()
                if sleep_duration > 0:
                    try:
                        await asyncio.wait_for(self._stop_event.wait(), timeout=sleep_duration)
                    except asyncio.TimeoutError:
                        pass

                frame_counter += 1
        finally:
            logger.info("SimulatedLocationService has stopped after %d fixes.", frame_counter)
