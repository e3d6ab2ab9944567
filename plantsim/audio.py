"""
Audio collaborator for the trainer.

The server never plays sound itself: cues are queued for the browser to
drain and forwarded to any registered listeners. Mute is process-wide.
"""
import logging
import threading
from collections import deque
from typing import Callable, Deque, Dict, List

from interfaces import AudioSink
from .types import AudioCue

logger = logging.getLogger("AudioCues")


class CueBus(AudioSink):
    def __init__(self, max_queued: int = 100):
        self._queue: Deque[Dict[str, object]] = deque(maxlen=max_queued)
        self._listeners: List[Callable[[str], None]] = []
        self._muted = False
        self._loop_active = False
        self._seq = 0
        self._lock = threading.Lock()

    @property
    def muted(self) -> bool:
        return self._muted

    @property
    def loop_active(self) -> bool:
        return self._loop_active

    def set_muted(self, muted: bool) -> None:
        self._muted = bool(muted)
        if self._muted and self._loop_active:
            # Muting silences the siren too
            self.stop_loop()
        logger.info(f"Audio {'muted' if self._muted else 'unmuted'}")

    def add_listener(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

    def play(self, cue: str) -> None:
        if self._muted:
            return
        try:
            cue = AudioCue(cue).value
        except ValueError:
            logger.warning(f"Unknown audio cue '{cue}' ignored")
            return
        self._emit(cue)

    def start_loop(self) -> None:
        if self._loop_active or self._muted:
            return
        self._loop_active = True
        self._emit(AudioCue.EVACUATION_LOOP_START.value)

    def stop_loop(self) -> None:
        if not self._loop_active:
            return
        self._loop_active = False
        self._emit(AudioCue.EVACUATION_LOOP_STOP.value)

    def drain(self) -> List[Dict[str, object]]:
        """Pop every queued cue, oldest first."""
        with self._lock:
            cues = list(self._queue)
            self._queue.clear()
        return cues

    def _emit(self, cue: str) -> None:
        with self._lock:
            self._seq += 1
            self._queue.append({'seq': self._seq, 'cue': cue})
        for listener in list(self._listeners):
            try:
                listener(cue)
            except Exception as e:
                logger.warning(f"Audio cue '{cue}' could not be delivered: {e}")
