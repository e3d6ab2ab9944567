import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

# Configure logging
logger = logging.getLogger("ViewOverrides")


@dataclass(frozen=True)
class ViewOverride:
    """Represents a display-only override of one field for one viewpoint."""
    value: Any
    set_at_tick: int = 0
    source: str = "manual"  # Who/what set the override


class ViewOverrideManager:
    """
    Substitutes observed values per viewpoint without touching canonical
    state. The comms-loss freeze is one override: ``hmi.comms_status = LOST``.
    """

    def __init__(self):
        self._overrides: Dict[Tuple[str, str], ViewOverride] = {}  # (viewpoint, field) -> override
        self._lock = threading.Lock()

    def set_override(self, viewpoint: str, field_name: str, value: Any,
                     tick: int = 0, source: str = "manual") -> None:
        """
        Set (or replace) an override on a viewpoint field.

        Args:
            viewpoint: "trainer" or "hmi"
            field_name: Snapshot key to substitute (e.g. "comms_status")
            value: Value the viewpoint observes instead of ground truth
            tick: Engine tick at which the override was set
            source: Source of the override
        """
        with self._lock:
            self._overrides[(viewpoint, field_name)] = ViewOverride(value, tick, source)
        logger.info(f"View override set: {viewpoint}.{field_name} = {value} (source: {source})")

    def release_override(self, viewpoint: str, field_name: str) -> bool:
        """Release an override. Returns True if one was active."""
        with self._lock:
            released = self._overrides.pop((viewpoint, field_name), None) is not None
        if released:
            logger.info(f"View override released: {viewpoint}.{field_name}")
        return released

    def get_override(self, viewpoint: str, field_name: str) -> Optional[ViewOverride]:
        with self._lock:
            return self._overrides.get((viewpoint, field_name))

    def is_active(self, viewpoint: str, field_name: str) -> bool:
        return self.get_override(viewpoint, field_name) is not None

    def apply(self, viewpoint: str, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``snapshot`` with this viewpoint's overrides applied."""
        with self._lock:
            active = {f: o.value for (vp, f), o in self._overrides.items() if vp == viewpoint}
        if not active:
            return snapshot
        masked = dict(snapshot)
        masked.update(active)
        return masked

    def clear(self) -> None:
        with self._lock:
            self._overrides.clear()

    def get_all_overrides(self) -> Dict[str, Dict]:
        """Get all active overrides with their details."""
        with self._lock:
            return {
                f"{vp}.{f}": {
                    'value': o.value,
                    'set_at_tick': o.set_at_tick,
                    'source': o.source,
                }
                for (vp, f), o in self._overrides.items()
            }
