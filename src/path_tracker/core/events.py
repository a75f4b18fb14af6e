import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

# The type of value a publisher hands to its subscribers.
EventType = TypeVar("EventType")


class Subscription:
    """Handle returned by `Publisher.subscribe`; cancelling it is idempotent."""
    __slots__ = ("_publisher", "_callback")

    def __init__(self, publisher: "Publisher", callback: Callable) -> None:
        self._publisher = publisher
        self._callback = callback

    @property
    def active(self) -> bool:
        return self._publisher is not None

    def cancel(self) -> None:
        if self._publisher is not None:
            self._publisher._remove(self._callback)
            self._publisher = None


class Publisher(Generic[EventType]):
    """
    Synchronous, ordered publish-subscribe channel.

    Subscribers are called in subscription order, on the caller's thread,
    before `publish` returns. A failing subscriber is logged and does not
    prevent delivery to the remaining ones.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._callbacks: list[Callable[[EventType], None]] = []

    def __len__(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable[[EventType], None]) -> Subscription:
        self._callbacks.append(callback)
        return Subscription(self, callback)

    def publish(self, event: EventType) -> None:
        # Copy so that subscribers may unsubscribe while being notified.
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception:
                logger.exception("Subscriber of '%s' failed handling %r", self.name, event)

    def _remove(self, callback: Callable) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass
