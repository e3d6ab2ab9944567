from enum import Enum
from typing import Tuple

from .state import SimulationState
from .types import PlantStatus


class EvacuationPhase(Enum):
    IDLE = "IDLE"
    COUNTING = "COUNTING"


def phase(state: SimulationState) -> EvacuationPhase:
    return EvacuationPhase.COUNTING if state.evacuation_timer > 0 else EvacuationPhase.IDLE


def arm(state: SimulationState, seconds: int) -> Tuple[SimulationState, bool]:
    """
    IDLE -> COUNTING. Returns (state, armed); a request while already
    counting leaves the running countdown untouched.
    """
    if phase(state) == EvacuationPhase.COUNTING:
        return state, False
    return state.with_changes(evacuation_timer=max(1, int(seconds))), True


def countdown(state: SimulationState) -> Tuple[SimulationState, bool]:
    """
    One tick of the countdown. Returns (state, finished) where finished is
    True only on the tick that reaches zero; the plant goes OFF on that tick.
    """
    if phase(state) == EvacuationPhase.IDLE:
        return state, False

    remaining = state.evacuation_timer - 1
    if remaining > 0:
        return state.with_changes(evacuation_timer=remaining), False
    return state.with_changes(evacuation_timer=0, plant_status=PlantStatus.OFF), True
