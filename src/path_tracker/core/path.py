import threading
from typing import Callable

from .events import Publisher, Subscription
from ..models import Position


class PathAccumulator:
    """
    Append-only, insertion-ordered record of the positions of one session.

    Appends come from the session's sample pump while renderers may read from
    another thread; a lock keeps every snapshot a consistent prefix of the path.
    Subscribers are told the new length after each append or reset and pull
    `snapshot()` themselves.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._points: list[Position] = []
        self._updates: Publisher[int] = Publisher("path")

    def __len__(self) -> int:
        with self._lock:
            return len(self._points)

    @property
    def last(self) -> Position | None:
        with self._lock:
            return self._points[-1] if self._points else None

    def append(self, position: Position) -> None:
        with self._lock:
            self._points.append(position)
            size = len(self._points)
        self._updates.publish(size)

    def reset(self) -> None:
        with self._lock:
            self._points.clear()
        self._updates.publish(0)

    def snapshot(self) -> tuple[Position, ...]:
        with self._lock:
            return tuple(self._points)

    def subscribe(self, callback: Callable[[int], None]) -> Subscription:
        return self._updates.subscribe(callback)
