"""
Environment model transitions.

Pure functions from one SimulationState to the next. Auto-ramp is the only
path that drifts readings on its own; everything else here is applied on
behalf of an operator command.
"""
from typing import Optional, Tuple

from .state import SimulationState
from .types import ComponentStatus, PlantStatus

# Per-tick drift while ventilation is faulted
O2_STEP = 0.02
CO_STEP = 1
CH4_STEP = 0.02
O2_FLOOR = 0.0
CH4_CEILING = 100.0


def ramp_active(state: SimulationState) -> bool:
    """Auto-ramp gates: plant running, ventilation faulted, ramp enabled."""
    return (state.plant_status == PlantStatus.RUNNING
            and state.ventilation == ComponentStatus.FAULT
            and state.auto_ramp)


def apply_auto_ramp(state: SimulationState) -> Tuple[SimulationState, Optional[str]]:
    """
    Apply one tick of gas drift.

    Returns the new state and the audit detail line, or the unchanged state
    and None when any gate is closed.
    """
    if not ramp_active(state):
        return state, None

    o2 = max(O2_FLOOR, round(state.o2 - O2_STEP, 2))
    co = int(round(state.co + CO_STEP))
    ch4 = min(CH4_CEILING, round(state.ch4_lel + CH4_STEP, 2))

    new_state = state.with_changes(o2=o2, co=co, ch4_lel=ch4)
    detail = f"o2={_fmt(o2)}% co={co}ppm ch4={_fmt(ch4)}%LEL"
    return new_state, detail


def inject_fault(state: SimulationState, component: str) -> SimulationState:
    return state.with_changes(**{component: ComponentStatus.FAULT})


def toggle(state: SimulationState, key: str) -> SimulationState:
    return state.with_changes(**{key: not getattr(state, key)})


def set_reading(state: SimulationState, key: str, value: float) -> SimulationState:
    """Direct overwrite; only auto-ramp keeps CO on whole ppm."""
    return state.with_changes(**{key: value})


def _fmt(value: float) -> str:
    # 20.90 -> 20.9, 6.0 -> 6
    return f"{value:g}"
