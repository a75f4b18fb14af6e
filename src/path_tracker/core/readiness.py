import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from .events import Publisher, Subscription
from .protocols import LocationStatusReader, PermissionRequester
from .state import AuthorizationState

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Readiness:
    """Snapshot of the three tracking preconditions at one instant."""
    authorization: AuthorizationState
    location_enabled: bool
    surface_ready: bool

    @property
    def eligible(self) -> bool:
        return (
            self.authorization is AuthorizationState.GRANTED
            and self.location_enabled
            and self.surface_ready
        )


class AuthorizationGate:
    """
    Tracks whether the location permission has been granted.

    The permission dialog is shown at most once per appearance cycle; a denial
    stands until the next cycle is opened with `begin_cycle`.
    """

    def __init__(
        self,
        requester: PermissionRequester,
        permissions: Sequence[str],
        location_permission: str,
        on_change: Callable[[], None],
    ):
        self._requester = requester
        self._permissions = list(permissions)
        self._location_permission = location_permission
        self._on_change = on_change

        self._state = AuthorizationState.UNKNOWN
        self._requested = False

    @property
    def state(self) -> AuthorizationState:
        return self._state

    @property
    def requested(self) -> bool:
        return self._requested

    def begin_cycle(self) -> None:
        self._requested = False

    async def request_authorization(self) -> AuthorizationState:
        """
        Asks the requester for the configured permissions.
        Returns: the resulting state, or the current one if this cycle already asked.
        """
        if self._requested:
            logger.debug("Authorization already requested in this cycle (%s).", self._state.name)
            return self._state

        self._requested = True
        logger.info("Requesting permissions: %s", ", ".join(self._permissions))
        try:
            result = await self._requester.request_permissions(self._permissions)
            granted = bool(result.get(self._location_permission, False))
        except asyncio.CancelledError:
            logger.info("Permission request cancelled before an answer arrived.")
            raise
        except Exception:
            logger.exception("Permission request failed; treating as denied.")
            granted = False

        self._set(AuthorizationState.GRANTED if granted else AuthorizationState.DENIED)
        return self._state

    def _set(self, state: AuthorizationState) -> None:
        changed = state is not self._state
        self._state = state
        logger.info("Authorization: %s", state.name)
        if changed:
            self._on_change()


class LocationAvailability:
    """Reports the platform's location switch. Never tries to turn it on."""

    def __init__(self, reader: LocationStatusReader, on_change: Callable[[], None]):
        self._reader = reader
        self._on_change = on_change
        self._enabled = False

    @property
    def enabled(self) -> bool:
        """Value seen by the last `refresh`."""
        return self._enabled

    def is_enabled(self) -> bool:
        return bool(self._reader.is_location_enabled())

    def refresh(self) -> bool:
        enabled = self.is_enabled()
        if enabled != self._enabled:
            self._enabled = enabled
            logger.info("Location services %s.", "enabled" if enabled else "disabled")
            self._on_change()
        return enabled


class SurfaceReadiness:
    """Set once by the renderer after its first layout pass; never reverts."""

    def __init__(self, on_change: Callable[[], None]):
        self._on_change = on_change
        self._ready = False

    def is_ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        if self._ready:
            return
        self._ready = True
        logger.info("Map surface ready.")
        self._on_change()


class ReadinessAggregator:
    """
    Owns the three precondition inputs and publishes one consolidated
    `Readiness` snapshot each time any of them changes.
    """

    def __init__(
        self,
        requester: PermissionRequester,
        reader: LocationStatusReader,
        permissions: Sequence[str],
        location_permission: str,
    ):
        self._changes: Publisher[Readiness] = Publisher("readiness")

        self.authorization = AuthorizationGate(
            requester, permissions, location_permission, on_change=self._notify
        )
        self.location = LocationAvailability(reader, on_change=self._notify)
        self.surface = SurfaceReadiness(on_change=self._notify)

    @property
    def readiness(self) -> Readiness:
        return Readiness(
            authorization=self.authorization.state,
            location_enabled=self.location.enabled,
            surface_ready=self.surface.is_ready(),
        )

    @property
    def eligible(self) -> bool:
        return self.readiness.eligible

    def subscribe(self, callback: Callable[[Readiness], None]) -> Subscription:
        return self._changes.subscribe(callback)

    def _notify(self) -> None:
        snapshot = self.readiness
        logger.debug("Readiness changed: %s (eligible=%s)", snapshot, snapshot.eligible)
        self._changes.publish(snapshot)
