import logging
import os
import threading
from typing import Callable, Optional

from interfaces import SimulationClock

logger = logging.getLogger("Ticker")


class Ticker(SimulationClock):
    """
    Calls ``handler`` once per interval on a daemon thread.
    Best-effort wall-clock cadence: a late tick is not made up for.
    """

    def __init__(self, handler: Callable[[], None], interval: float = None):
        self._handler = handler
        self._interval = interval if interval is not None else float(os.environ.get("TICK_INTERVAL", "1.0"))
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        # Serializes start/stop/restart across web request threads
        self._lock = threading.Lock()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start ticking."""
        with self._lock:
            self._start()

    def stop(self) -> None:
        """Stop ticking and wait for the thread to exit."""
        with self._lock:
            self._stop()

    def restart(self) -> None:
        """Restart the cadence from now. No-op if the ticker is not running."""
        with self._lock:
            if not self.running:
                return
            self._stop()
            self._start()

    def _start(self) -> None:
        if self.running:
            return
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(target=self._loop, args=(stop_event,),
                                        name="Ticker", daemon=True)
        self._thread.start()
        logger.info(f"Ticker started ({self._interval}s)")

    def _stop(self) -> None:
        thread, self._thread = self._thread, None
        self._stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        logger.info("Ticker stopped")

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval):
            try:
                self._handler()
            except Exception:
                logger.exception("Tick handler failed")
