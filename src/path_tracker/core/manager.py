import asyncio
import logging
from typing import Callable

from .errors import LocationUnavailable, PermissionDenied, TrackingError
from .events import Publisher, Subscription
from .protocols import MapView, SettingsPrompt
from .readiness import Readiness, ReadinessAggregator
from .session import TrackingSession
from .state import AuthorizationState, TrackingState
from ..configs import MapSettings
from ..models import Position

logger = logging.getLogger(__name__)


class TrackingScreen:
    """
    The headless core of one appearance of the tracking map screen.

    It drives the precondition checks on creation, wires readiness, session
    and path events into the `MapView`, and forwards the start/stop buttons to
    the session. The session and readiness inputs are application-scoped and
    outlive the screen: destroying a screen drops its subscriptions and any
    pending permission request but leaves a running session alone.
    """
    def __init__(
        self,
        session: TrackingSession,
        readiness: ReadinessAggregator,
        prompt: SettingsPrompt,
        view: MapView,
        map_settings: MapSettings,
        last_known: Callable[[], Position],
    ):
        self.session = session
        self.readiness = readiness
        self.prompt = prompt
        self.view = view
        self.map_settings = map_settings
        self.last_known = last_known

        self.errors: Publisher[TrackingError] = Publisher("screen.errors")

        self._subscriptions: list[Subscription] = []
        self._auth_task: asyncio.Task | None = None
        self._resumed = False
        self._destroyed = False

    def run_task(self, coro) -> asyncio.Task:
        """
        Schedules a coroutine on the running loop and makes sure its
        errors are never silent.
        """
        task = asyncio.get_running_loop().create_task(coro)

        def _on_complete(t: asyncio.Task):
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                logger.error("Screen task crashed: %s", exc, exc_info=exc)

        task.add_done_callback(_on_complete)
        return task

    @property
    def authorization_pending(self) -> bool:
        return self._auth_task is not None and not self._auth_task.done()

    # --- Lifecycle ---

    def create(self) -> None:
        """
        Logic: open a new permission cycle, ask for permissions in the
        background and check the location switch, prompting if it is off.
        """
        self._destroyed = False
        self._cancel_authorization()
        self.readiness.authorization.begin_cycle()
        self._auth_task = self.run_task(self._authorize())

        if not self.readiness.location.refresh():
            self._report(LocationUnavailable("location services are disabled"))
            self.prompt.prompt_location_settings()

    def view_created(self) -> None:
        """
        Logic: subscribe the view to every channel, centre the map and
        report the surface as laid out.
        """
        self._drop_subscriptions()
        self._subscriptions = [
            self.readiness.subscribe(self._on_readiness),
            self.session.state_changes.subscribe(self._on_state_change),
            self.session.follow_changes.subscribe(self._on_follow_change),
            self.session.failures.subscribe(self._report),
            self.session.path.subscribe(self._on_path_update),
        ]

        center = self.session.path.last or self.last_known()
        self.view.center_on(center, self.map_settings.zoom)

        self.readiness.surface.mark_ready()
        self._render_readiness(self.readiness.readiness)

    def resume(self) -> None:
        self._resumed = True
        self.readiness.location.refresh()
        self.view.set_overlays_enabled(True)
        self.view.set_path(self.session.path.snapshot())
        self.view.set_follow(self.session.following)

    def pause(self) -> None:
        self._resumed = False
        self.view.set_follow(False)
        self.view.set_overlays_enabled(False)

    def destroy(self) -> None:
        """
        Logic: drop every subscription and the pending permission request.
        A running session is left running.
        """
        if self._destroyed:
            return
        self._destroyed = True
        self._resumed = False

        self._drop_subscriptions()
        self._cancel_authorization()

        logger.info("Screen destroyed; session left %s.", self.session.state.name)

    def _drop_subscriptions(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()

    def _cancel_authorization(self) -> None:
        if self.authorization_pending:
            self._auth_task.cancel()
        self._auth_task = None

    # --- Actions ---

    async def press_start(self) -> bool:
        return await self.session.start()

    async def press_stop(self) -> bool:
        return await self.session.stop()

    # --- Handlers ---

    async def _authorize(self) -> None:
        state = await self.readiness.authorization.request_authorization()
        if state is AuthorizationState.DENIED:
            self._report(PermissionDenied("location permission denied"))

    def _report(self, error: TrackingError) -> None:
        logger.warning("%s: %s", type(error).__name__, error)
        self.errors.publish(error)
        self.view.show_message(str(error))

    def _render_readiness(self, readiness: Readiness) -> None:
        self.view.set_visible(readiness.surface_ready)
        self.view.set_start_enabled(readiness.eligible and self.session.state is TrackingState.IDLE)

    def _on_readiness(self, readiness: Readiness) -> None:
        self._render_readiness(readiness)

    def _on_state_change(self, change: tuple[TrackingState, TrackingState]) -> None:
        _, new_state = change
        self.view.set_start_enabled(self.readiness.eligible and new_state is TrackingState.IDLE)

    def _on_follow_change(self, following: bool) -> None:
        if self._resumed:
            self.view.set_follow(following)

    def _on_path_update(self, size: int) -> None:
        if self._resumed:
            self.view.set_path(self.session.path.snapshot())
