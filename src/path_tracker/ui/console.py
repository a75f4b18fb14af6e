import logging
from typing import Sequence

from ..models import Position

logger = logging.getLogger(__name__)


class ConsoleMapView:
    """
    A MapView that renders to the log instead of a map widget.

    Keeps the last value of every visual property so a headless run (or a
    test) can inspect what a real map would be showing.
    """

    def __init__(self):
        self.visible: bool = False
        self.start_enabled: bool = False
        self.following: bool = False
        self.overlays_enabled: bool = False
        self.center: Position | None = None
        self.zoom: float | None = None
        self.points: tuple[Position, ...] = ()
        self.messages: list[str] = []

    def set_visible(self, visible: bool) -> None:
        if visible != self.visible:
            logger.info("Map %s.", "shown" if visible else "hidden")
        self.visible = visible

    def set_start_enabled(self, enabled: bool) -> None:
        if enabled != self.start_enabled:
            logger.info("Start button %s.", "enabled" if enabled else "disabled")
        self.start_enabled = enabled

    def center_on(self, position: Position, zoom: float) -> None:
        self.center, self.zoom = position, zoom
        logger.info("Map centred on %s at zoom %.1f.", position.as_tuple(), zoom)

    def set_path(self, points: Sequence[Position]) -> None:
        self.points = tuple(points)
        if self.points:
            last = self.points[-1]
            logger.info("Path: %d points, last %.6f, %.6f", len(self.points), last.latitude, last.longitude)
        if self.following and self.points:
            self.center = self.points[-1]

    def set_follow(self, enabled: bool) -> None:
        if enabled != self.following:
            logger.info("Follow location %s.", "on" if enabled else "off")
        self.following = enabled

    def set_overlays_enabled(self, enabled: bool) -> None:
        self.overlays_enabled = enabled

    def show_message(self, text: str) -> None:
        self.messages.append(text)
        logger.warning("Message shown: %s", text)
