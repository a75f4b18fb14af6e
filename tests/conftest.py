import asyncio
from unittest.mock import AsyncMock

import pytest

from path_tracker.configs import AppSettings, SessionSettings, SimulationSettings
from path_tracker.core import (
    PathAccumulator,
    ReadinessAggregator,
    TrackingScreen,
    TrackingSession,
)
from path_tracker.models import Position
from path_tracker.platforms import DummyPlatform
from path_tracker.services import LocationService
from path_tracker.ui import ConsoleMapView


class ScriptedService(LocationService):
    """A LocationService whose acknowledgment, failures and fixes are driven by the test."""

    def __init__(
        self,
        *,
        acknowledge: bool = True,
        ack_delay: float = 0.0,
        crash: bool = False,
        ignore_stop: bool = False,
    ):
        super().__init__()
        self.acknowledge = acknowledge
        self.ignore_stop = ignore_stop
        self.ack_delay = ack_delay
        self.crash = crash
        self.pre_ack_positions: list[Position] = []
        self.runs = 0
        self._terminate = asyncio.Event()

    async def run(self) -> None:
        self.runs += 1
        self._terminate = asyncio.Event()

        for position in self.pre_ack_positions:
            self._emit(position)

        if self.ack_delay:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.ack_delay)
                return
            except asyncio.TimeoutError:
                pass

        if self.crash:
            raise RuntimeError("no location provider")
        if not self.acknowledge:
            return

        self._mark_ready()
        if self.ignore_stop:
            # A hung provider: only the OS (or cancellation) ends it.
            await self._terminate.wait()
            return

        stop_wait = asyncio.create_task(self._stop_event.wait())
        terminate_wait = asyncio.create_task(self._terminate.wait())
        try:
            await asyncio.wait({stop_wait, terminate_wait}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop_wait.cancel()
            terminate_wait.cancel()

    def push(self, *positions: Position) -> None:
        for position in positions:
            self._emit(position)

    def terminate(self) -> None:
        """Simulates the OS killing the service."""
        self._terminate.set()


def make_position(index: int) -> Position:
    return Position(latitude=52.0 + index * 1e-4, longitude=13.0 + index * 1e-4, timestamp=1_700_000_000.0 + index)


async def settle(delay: float = 0.02) -> None:
    """Lets queued tasks and callbacks run."""
    await asyncio.sleep(delay)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        session=SessionSettings(
            follow_delay_s=0.05,
            start_timeout_s=0.2,
            stop_timeout_s=0.2,
        ),
        simulation=SimulationSettings(
            permission_delay_s=0.0,
            startup_delay_s=0.0,
            frequency_hz=50.0,
        ),
    )


@pytest.fixture
def platform(settings) -> DummyPlatform:
    return DummyPlatform(settings)


@pytest.fixture
def service() -> ScriptedService:
    service = ScriptedService()
    # Count calls while keeping the real lifecycle behaviour.
    service.start = AsyncMock(wraps=service.start)
    service.stop = AsyncMock(wraps=service.stop)
    return service


@pytest.fixture
def readiness(settings, platform) -> ReadinessAggregator:
    return ReadinessAggregator(
        requester=platform,
        reader=platform,
        permissions=settings.permissions.required,
        location_permission=settings.permissions.location_permission,
    )


@pytest.fixture
def path() -> PathAccumulator:
    return PathAccumulator()


@pytest.fixture
def session(service, readiness, path, settings) -> TrackingSession:
    return TrackingSession(service, readiness, path, settings.session)


@pytest.fixture
def make_ready(readiness):
    """Satisfies all three preconditions."""
    async def _make_ready() -> None:
        await readiness.authorization.request_authorization()
        readiness.location.refresh()
        readiness.surface.mark_ready()
        assert readiness.eligible
    return _make_ready


@pytest.fixture
def view() -> ConsoleMapView:
    return ConsoleMapView()


@pytest.fixture
def screen(session, readiness, platform, view, settings) -> TrackingScreen:
    return TrackingScreen(
        session=session,
        readiness=readiness,
        prompt=platform,
        view=view,
        map_settings=settings.map,
        last_known=platform.last_known_position,
    )
