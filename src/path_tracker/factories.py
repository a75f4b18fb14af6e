from dataclasses import dataclass

from .configs import AppSettings
from .core import PathAccumulator, ReadinessAggregator, TrackingScreen, TrackingSession
from .core.protocols import MapView
from .platforms import DummyPlatform, Platform


@dataclass
class TrackingApp:
    """Application-scoped objects; screens are created against these and may come and go."""
    settings: AppSettings
    platform: Platform
    readiness: ReadinessAggregator
    path: PathAccumulator
    session: TrackingSession

    def create_screen(self, view: MapView) -> TrackingScreen:
        """
        Creates a fresh screen coordinator bound to the shared session.
        """
        return TrackingScreen(
            session=self.session,
            readiness=self.readiness,
            prompt=self.platform,
            view=view,
            map_settings=self.settings.map,
            last_known=self.platform.last_known_position,
        )

    async def shutdown(self) -> None:
        await self.session.shutdown()
        self.platform.shutdown()


def create_platform(settings: AppSettings) -> Platform:
    return DummyPlatform(settings)


def create_tracking_app(settings: AppSettings, platform: Platform | None = None) -> TrackingApp:
    """
    Wires the readiness inputs, path and session around one platform.
    Must be called with a running event loop if the session is to be driven.
    """
    platform = platform or create_platform(settings)
    readiness = ReadinessAggregator(
        requester=platform,
        reader=platform,
        permissions=settings.permissions.required,
        location_permission=settings.permissions.location_permission,
    )
    path = PathAccumulator()
    session = TrackingSession(
        service=platform.create_service(),
        readiness=readiness,
        path=path,
        settings=settings.session,
    )
    return TrackingApp(
        settings=settings,
        platform=platform,
        readiness=readiness,
        path=path,
        session=session,
    )
