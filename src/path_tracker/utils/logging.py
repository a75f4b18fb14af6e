import time
import logging

class ThrottledLogger:
    """Collapses bursts of identical warnings (e.g. dropped samples) into one line per interval."""

    def __init__(self, logger: logging.Logger, interval_sec: float = 5.0) -> None:
        self._logger = logger
        self._interval = interval_sec
        self._last_log_time: float | None = None
        self._counter = 0

    def warning(self, message: str, *args, **kwargs) -> None:
        self._counter += 1
        now = time.monotonic()

        if self._last_log_time is None or now - self._last_log_time >= self._interval:
            self._logger.warning("[%d] " + message, self._counter, *args, **kwargs)
            self._last_log_time = now
            self._counter = 0
