import asyncio
import logging
from functools import wraps

from .errors import BackgroundStartFailure, TrackingError, UnexpectedTermination
from .events import Publisher
from .path import PathAccumulator
from .readiness import Readiness, ReadinessAggregator
from .state import TrackingState
from ..configs import SessionSettings
from ..services import LocationService
from ..types import _END
from ..utils import ThrottledLogger

logger = logging.getLogger(__name__)
dropped_logger = ThrottledLogger(logger)


def require_state(*states: TrackingState):
    """
    Guards a session command: outside the given states the command is
    rejected with a warning and returns False.
    """
    def decorator(func):
        @wraps(func)
        async def async_wrapper(self, *args, **kwargs):
            if self.state not in states:
                logger.warning(
                    "Session command '%s' rejected in state %s.", func.__name__, self.state.name
                )
                return False
            return await func(self, *args, **kwargs)
        return async_wrapper
    return decorator


class TrackingSession:
    """
    The tracking-session state machine.

    IDLE -> STARTING -> ACTIVE -> STOPPING -> IDLE, with STARTING -> IDLE on a
    failed start and STARTING -> STOPPING when stopped before acknowledgment.
    Start is gated by the readiness aggregator; losing readiness while the
    service runs stops it. The session is application-scoped: screens come
    and go, the session and its service keep running until told to stop.
    """

    def __init__(
        self,
        service: LocationService,
        readiness: ReadinessAggregator,
        path: PathAccumulator,
        settings: SessionSettings,
    ):
        self._service = service
        self._readiness = readiness
        self._path = path
        self._settings = settings

        self._state = TrackingState.IDLE
        self._following = False
        # Bumped on every start so late acknowledgments of a superseded
        # start can be recognised.
        self._generation = 0
        self._pump_task: asyncio.Task | None = None
        self._follow_handle: asyncio.TimerHandle | None = None
        self._background_tasks: set[asyncio.Task] = set()

        self.state_changes: Publisher[tuple[TrackingState, TrackingState]] = Publisher("session.state")
        self.follow_changes: Publisher[bool] = Publisher("session.follow")
        self.failures: Publisher[TrackingError] = Publisher("session.failures")

        self._readiness_subscription = readiness.subscribe(self._on_readiness)

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def following(self) -> bool:
        return self._following

    @property
    def path(self) -> PathAccumulator:
        return self._path

    @property
    def service(self) -> LocationService:
        return self._service

    # --- Commands ---

    @require_state(TrackingState.IDLE)
    async def start(self) -> bool:
        """
        Starts the background service if every precondition holds.
        Returns: True once the session is ACTIVE.
        """
        if not self._readiness.eligible:
            logger.warning("Start ignored: tracking not ready (%s).", self._readiness.readiness)
            return False

        self._generation += 1
        generation = self._generation
        self._transition(TrackingState.STARTING)

        if self._settings.reset_path_on_start:
            self._path.reset()

        error: str | None = None
        try:
            acknowledged = await asyncio.wait_for(
                self._service.start(), timeout=self._settings.start_timeout_s
            )
            if not acknowledged:
                error = "service refused to start"
        except asyncio.TimeoutError:
            acknowledged = False
            error = f"no acknowledgment within {self._settings.start_timeout_s}s"
        except Exception as e:
            logger.exception("Background service start raised.")
            acknowledged = False
            error = f"start raised {e!r}"

        if generation != self._generation or self._state is not TrackingState.STARTING:
            # A stop (explicit or forced) took over while the acknowledgment was pending.
            logger.info("Start acknowledgment arrived after the session was stopped.")
            if acknowledged and self._state is TrackingState.IDLE and self._service.is_running:
                await self._stop_service()
            return False

        if not acknowledged:
            logger.error("Tracking failed to start: %s", error)
            await self._stop_service()
            self._transition(TrackingState.IDLE)
            self.failures.publish(BackgroundStartFailure(error))
            return False

        self._transition(TrackingState.ACTIVE)
        self._discard_pending_samples()
        self._pump_task = self._spawn(self._process_loop(generation))
        self._arm_follow_timer()
        logger.info("Tracking active.")
        return True

    @require_state(TrackingState.STARTING, TrackingState.ACTIVE)
    async def stop(self) -> bool:
        """
        Stops the background service and returns to IDLE.
        Returns: True if a running session was stopped.
        """
        self._begin_stop("stop requested")
        await self._finish_stop()
        return True

    async def shutdown(self) -> None:
        """Graceful cleanup before application exit."""
        self._readiness_subscription.cancel()
        if self._state.is_running:
            await self.stop()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    # --- Transitions ---

    def _transition(self, new_state: TrackingState) -> None:
        old_state = self._state
        if old_state is new_state:
            return
        self._state = new_state
        logger.info("Session %s -> %s", old_state.name, new_state.name)
        self.state_changes.publish((old_state, new_state))

    def _begin_stop(self, reason: str) -> bool:
        """Synchronous half of a stop: leave STARTING/ACTIVE and detach the pump."""
        if not self._state.is_running:
            return False

        logger.info("Stopping tracking: %s", reason)
        self._transition(TrackingState.STOPPING)
        self._cancel_follow_timer()

        pump = self._pump_task
        self._pump_task = None
        if pump is not None and pump is not asyncio.current_task():
            pump.cancel()
        return True

    async def _finish_stop(self) -> None:
        await self._stop_service()
        self._transition(TrackingState.IDLE)

    async def _stop_service(self) -> None:
        try:
            await asyncio.wait_for(self._service.stop(), timeout=self._settings.stop_timeout_s)
        except asyncio.TimeoutError:
            logger.error("Background service did not stop within %ss.", self._settings.stop_timeout_s)
        except Exception:
            logger.exception("Background service stop raised.")

    def _on_readiness(self, readiness: Readiness) -> None:
        if readiness.eligible or not self._state.is_running:
            return
        if self._begin_stop(f"readiness lost ({readiness})"):
            self._spawn(self._finish_stop())

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Session background task crashed", exc_info=task.exception())

    # --- Follow mode ---

    def _arm_follow_timer(self) -> None:
        self._cancel_follow_timer()
        loop = asyncio.get_running_loop()
        self._follow_handle = loop.call_later(self._settings.follow_delay_s, self._enable_follow)

    def _enable_follow(self) -> None:
        self._follow_handle = None
        if self._state is not TrackingState.ACTIVE:
            return
        self._following = True
        logger.info("Follow mode enabled.")
        self.follow_changes.publish(True)

    def _cancel_follow_timer(self) -> None:
        if self._follow_handle is not None:
            self._follow_handle.cancel()
            self._follow_handle = None
        if self._following:
            self._following = False
            logger.info("Follow mode disabled.")
            self.follow_changes.publish(False)

    # --- Sample pump ---

    def _discard_pending_samples(self) -> None:
        """Drops fixes queued before the acknowledgment; an end-of-stream marker is kept."""
        queue = self._service.output_queue
        while not queue.empty():
            item = queue.get_nowait()
            if item is _END:
                queue.put_nowait(_END)
                break
            dropped_logger.warning("Dropping sample produced before acknowledgment.")

    async def _process_loop(self, generation: int) -> None:
        """Moves samples from the service queue into the path while ACTIVE."""
        queue = self._service.output_queue

        while True:
            item = await queue.get()

            if item is _END:
                break

            if self._state is TrackingState.ACTIVE and generation == self._generation:
                self._path.append(item)
            else:
                dropped_logger.warning("Dropping sample received in state %s.", self._state.name)

        if self._state is TrackingState.ACTIVE and generation == self._generation:
            logger.error("Background service terminated unexpectedly; keeping %d points.", len(self._path))
            self._begin_stop("service terminated")
            await self._finish_stop()
            self.failures.publish(UnexpectedTermination("background service terminated while active"))
