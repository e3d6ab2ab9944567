import logging
import threading
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Callable, Dict, List, Optional

logger = logging.getLogger("AuditLog")


@dataclass(frozen=True)
class LogEntry:
    """Immutable audit record."""
    timestamp: str
    source: str
    event: str
    detail: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _wall_clock() -> str:
    return datetime.now().strftime("%H:%M:%S")


class AuditLog:
    """
    Append-only, most-recent-first record of state-changing events.
    Entries are never edited; the whole sequence is dropped only on reset.
    """

    def __init__(self, clock: Optional[Callable[[], str]] = None):
        self._clock = clock or _wall_clock
        self._entries: List[LogEntry] = []
        self._lock = threading.Lock()

    def record(self, source: str, event: str, detail: str) -> LogEntry:
        entry = LogEntry(timestamp=self._clock(), source=source, event=event, detail=detail)
        with self._lock:
            self._entries.insert(0, entry)
        logger.info(f"[{source}] {event}: {detail}")
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries = []

    def entries(self) -> List[LogEntry]:
        with self._lock:
            return list(self._entries)

    def find(self, event: str) -> List[LogEntry]:
        return [e for e in self.entries() if e.event == event]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
