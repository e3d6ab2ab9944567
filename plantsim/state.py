"""
Simulation state value objects.

SimulationState is immutable: every command or tick produces a new value via
``dataclasses.replace``. Presentation layers only ever see ``to_dict()``
snapshots of it.
"""
from dataclasses import dataclass, field, replace
from typing import Dict, Any, Tuple

from .parameters import get_simulation_parameters
from .types import PlantStatus, ComponentStatus, CommsStatus, Severity


@dataclass(frozen=True)
class Alarm:
    """Active alarm. Equality and hashing are by ``code`` only."""
    severity: Severity = field(compare=False)
    code: str
    message: str = field(compare=False, default="")

    def fields(self) -> Tuple[str, str, str]:
        """Full structural identity, used to detect message/severity changes."""
        return (self.severity.value, self.code, self.message)

    def to_dict(self) -> Dict[str, str]:
        return {
            'severity': self.severity.value,
            'code': self.code,
            'message': self.message,
        }


@dataclass(frozen=True)
class SimulationState:
    scenario: int = 3
    plant_status: PlantStatus = PlantStatus.OFF
    ventilation: ComponentStatus = ComponentStatus.OFF
    gas_analysis: ComponentStatus = ComponentStatus.OFF
    lighting: ComponentStatus = ComponentStatus.OFF
    o2: float = 20.9  # %
    co: float = 5  # ppm
    ch4_lel: float = 0.1  # % LEL
    pressure: float = 1.01  # bar
    temperature: float = 18.0  # °C
    e_stop: bool = False
    loto: bool = False
    comms_status: CommsStatus = CommsStatus.NORMAL
    evacuation_timer: int = 0
    active_alarms: Tuple[Alarm, ...] = ()
    auto_ramp: bool = False
    thr_o2_low: float = 19.5
    thr_co_high: float = 30
    thr_ch4_lel_high: float = 1.0

    @property
    def is_running(self) -> bool:
        return self.plant_status == PlantStatus.RUNNING

    @property
    def is_emergency(self) -> bool:
        """E-STOP, LOTO or an evacuation countdown in progress."""
        return self.e_stop or self.loto or self.evacuation_timer > 0

    @property
    def has_critical_alarm(self) -> bool:
        return any(a.severity == Severity.CRITICAL for a in self.active_alarms)

    @property
    def alarm_level(self) -> str:
        if self.has_critical_alarm:
            return Severity.CRITICAL.value
        return Severity.WARN.value if self.active_alarms else "NONE"

    def alarm_codes(self) -> Tuple[str, ...]:
        return tuple(a.code for a in self.active_alarms)

    def with_changes(self, **changes) -> 'SimulationState':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Plain, JSON-ready snapshot including derived flags."""
        return {
            'scenario': self.scenario,
            'plant_status': self.plant_status.value,
            'ventilation': self.ventilation.value,
            'gas_analysis': self.gas_analysis.value,
            'lighting': self.lighting.value,
            'o2': self.o2,
            'co': self.co,
            'ch4_lel': self.ch4_lel,
            'pressure': self.pressure,
            'temperature': self.temperature,
            'e_stop': self.e_stop,
            'loto': self.loto,
            'comms_status': self.comms_status.value,
            'evacuation_timer': self.evacuation_timer,
            'active_alarms': [a.to_dict() for a in self.active_alarms],
            'auto_ramp': self.auto_ramp,
            'thr_o2_low': self.thr_o2_low,
            'thr_co_high': self.thr_co_high,
            'thr_ch4_lel_high': self.thr_ch4_lel_high,
            'is_emergency': self.is_emergency,
            'has_critical_alarm': self.has_critical_alarm,
            'alarm_level': self.alarm_level,
        }


def initial_state() -> SimulationState:
    """Fixed start-of-process configuration: plant off, clean atmosphere."""
    params = get_simulation_parameters()
    return SimulationState(
        o2=params.DEFAULTS['o2']['value'],
        co=int(params.DEFAULTS['co']['value']),
        ch4_lel=params.DEFAULTS['ch4_lel']['value'],
        pressure=params.DEFAULTS['pressure']['value'],
        temperature=params.DEFAULTS['temperature']['value'],
        thr_o2_low=params.get('thr_o2_low'),
        thr_co_high=params.get('thr_co_high'),
        thr_ch4_lel_high=params.get('thr_ch4_lel_high'),
    )
