import asyncio
import logging
from abc import ABC, abstractmethod
from asyncio import Queue, Event
from typing import final

from path_tracker.models.position import Position
from path_tracker.types import _END, StreamEnd

logger = logging.getLogger(__name__)


class LocationService(ABC):
    """
    Abstract Base Class for the long-running background location service.

    A LocationService keeps producing `Position` samples independently of the
    screen that started it. `start` and `stop` only need to share the service
    instance, not a call frame or screen: a recreated screen may stop a service
    its predecessor started.

    Every start creates a fresh output queue. Once the sampling loop exits, for
    whatever reason, the queue receives an end-of-stream sentinel.
    """

    def __init__(self):
        self._output_queue: Queue[Position | StreamEnd] = Queue()
        self._stop_event = Event()
        self._ready = Event()
        self._run_task: asyncio.Task | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def output_queue(self) -> Queue[Position | StreamEnd]:
        return self._output_queue

    @property
    def is_running(self) -> bool:
        return self._run_task is not None and not self._run_task.done()

    @abstractmethod
    async def run(self) -> None:
        """
        Acquires positions until the stop event is set.

        Implementations call `_mark_ready()` once sampling is live (this is the
        start acknowledgment) and `_emit()` for every fix. Returning or raising
        before `_mark_ready()` counts as a failed start.
        """
        raise NotImplementedError

    @final
    async def start(self) -> bool:
        """
        Spawns the sampling loop and waits for it to acknowledge.
        Returns: True once the loop is live, False if it exited first.
        """
        if self.is_running:
            logger.warning("%s already running.", self.name)
            return True

        self._output_queue = Queue()
        self._stop_event = Event()
        self._ready = Event()

        logger.info("Starting %s...", self.name)
        self._run_task = asyncio.create_task(self._run_guarded(), name=f"{self.name}.run")

        ready_wait = asyncio.create_task(self._ready.wait())
        try:
            await asyncio.wait({ready_wait, self._run_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            ready_wait.cancel()

        if self._ready.is_set():
            logger.info("%s acknowledged start.", self.name)
            return True

        logger.error("%s exited before acknowledging start.", self.name)
        return False

    @final
    async def stop(self) -> None:
        """
        Signals the sampling loop to stop and waits for it to finish.
        Safe to call when the service is not running.
        """
        task = self._run_task
        if task is None or task.done():
            return

        logger.info("Stopping %s...", self.name)
        self._stop_event.set()
        await task
        logger.info("%s stopped.", self.name)

    def _mark_ready(self) -> None:
        self._ready.set()

    def _emit(self, position: Position) -> None:
        self._output_queue.put_nowait(position)

    async def _run_guarded(self) -> None:
        try:
            await self.run()
        except asyncio.CancelledError:
            logger.info("%s run task was cancelled.", self.name)
            raise
        except Exception:
            logger.exception("%s crashed.", self.name)
        finally:
            self._output_queue.put_nowait(_END)
