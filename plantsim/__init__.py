from .parameters import SimulationParameters, get_simulation_parameters
from .types import (
    PlantStatus, ComponentStatus, CommsStatus, Severity, Viewpoint, SliderPolicy, AudioCue,
    COMPONENTS, TOGGLE_KEYS, SLIDER_KEYS, THRESHOLD_KEYS, COMMAND_SOURCES
)
from .state import Alarm, SimulationState, initial_state
from .audit import AuditLog, LogEntry
from .overrides import ViewOverrideManager
from .timers import TaskScheduler, ScheduledTask
from .audio import CueBus
from .scenarios import Scenario, ScenarioCatalog, ScenarioError
from .clock import Ticker
from .errors import CommandError
from .engine import TrainingEngine
from .commands import CommandSurface

__all__ = [
    'SimulationParameters', 'get_simulation_parameters',
    'PlantStatus', 'ComponentStatus', 'CommsStatus', 'Severity', 'Viewpoint', 'SliderPolicy', 'AudioCue',
    'COMPONENTS', 'TOGGLE_KEYS', 'SLIDER_KEYS', 'THRESHOLD_KEYS', 'COMMAND_SOURCES',
    'Alarm', 'SimulationState', 'initial_state',
    'AuditLog', 'LogEntry',
    'ViewOverrideManager',
    'TaskScheduler', 'ScheduledTask',
    'CueBus',
    'Scenario', 'ScenarioCatalog', 'ScenarioError',
    'Ticker',
    'CommandError',
    'TrainingEngine',
    'CommandSurface'
]
