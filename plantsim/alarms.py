"""
Alarm evaluator: derives the active alarm set from readings and thresholds.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .state import Alarm, SimulationState
from .types import PlantStatus, Severity

logger = logging.getLogger("AlarmEvaluator")

O2_LOW = "O2_LOW"
CO_HIGH = "CO_HIGH"
GAS_HIGH = "GAS_HIGH"

ALARM_CODES = (O2_LOW, CO_HIGH, GAS_HIGH)


def evaluate(state: SimulationState) -> Tuple[Alarm, ...]:
    """Alarms implied by the current readings, in O2, CO, CH4 order."""
    if state.plant_status != PlantStatus.RUNNING:
        return ()

    alarms = []
    if state.o2 < state.thr_o2_low:
        alarms.append(Alarm(Severity.WARN, O2_LOW, f"O2 Sotto Soglia ({state.o2}%)"))
    if state.co > state.thr_co_high:
        alarms.append(Alarm(Severity.WARN, CO_HIGH, f"CO Sopra Soglia ({state.co} ppm)"))
    if state.ch4_lel > state.thr_ch4_lel_high:
        alarms.append(Alarm(Severity.CRITICAL, GAS_HIGH, f"CH4 Sopra Soglia ({state.ch4_lel}% LEL)"))
    return tuple(alarms)


@dataclass(frozen=True)
class Recomputation:
    """Outcome of one recompute step."""
    state: SimulationState
    changed: bool
    added: Optional[Alarm] = None  # first newly raised alarm, if any


def recompute(state: SimulationState) -> Recomputation:
    """
    Replace the alarm set if the derived one differs by code or fields.
    ``added`` names the first alarm whose code was not active before.
    """
    derived = evaluate(state)
    if [a.fields() for a in derived] == [a.fields() for a in state.active_alarms]:
        return Recomputation(state, changed=False)

    previous = set(state.alarm_codes())
    added = next((a for a in derived if a.code not in previous), None)
    return Recomputation(state.with_changes(active_alarms=derived), changed=True, added=added)


def clear(state: SimulationState, code: str) -> SimulationState:
    """Drop one alarm code; it comes back on the next recompute if still true."""
    remaining = tuple(a for a in state.active_alarms if a.code != code)
    return state.with_changes(active_alarms=remaining)
