"""
Command surface: the only entry points through which trainer and HMI
intents change the simulation.

Arguments are validated against fixed vocabularies; an invalid one raises
CommandError before anything is mutated or logged. Each method returns True
when the command took effect and False when it was a valid no-op (for
example a shutdown while an evacuation is already counting down).
"""
import logging
import math

from . import alarms, environment, evacuation
from .engine import TrainingEngine
from .errors import CommandError
from .parameters import get_simulation_parameters
from .types import (
    AudioCue, SliderPolicy,
    COMPONENTS, TOGGLE_KEYS, SLIDER_KEYS, THRESHOLD_KEYS, COMMAND_SOURCES,
)

logger = logging.getLogger("CommandSurface")


def _require(value, allowed, what: str):
    if value not in allowed:
        logger.warning(f"Rejected {what} '{value}' (expected one of {', '.join(map(str, allowed))})")
        raise CommandError(f"Unknown {what}: {value}")
    return value


def _number(value, what: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise CommandError(f"{what} must be a number")
    if math.isnan(number) or math.isinf(number):
        raise CommandError(f"{what} must be finite")
    return number


class CommandSurface:
    def __init__(self, engine: TrainingEngine):
        self._engine = engine

    @property
    def engine(self) -> TrainingEngine:
        return self._engine

    # --- Trainer commands ---

    def start_scenario(self, scenario_id: int = 3) -> bool:
        """Replace the whole state with the scenario's start snapshot."""
        try:
            scenario_id = int(scenario_id)
        except (TypeError, ValueError):
            raise CommandError(f"Unknown scenario: {scenario_id}")
        _require(scenario_id, self._engine.catalog.ids(), "scenario")
        return self._engine.load_scenario(scenario_id)

    def inject_fault(self, component: str) -> bool:
        _require(component, COMPONENTS, "component")
        return self._engine.apply_command(
            'TRAINER', f'inject_fault_{component}', f'Guasto iniettato su {component}.',
            lambda s: environment.inject_fault(s, component))

    def controlled_shutdown(self, source: str = 'TRAINER') -> bool:
        """Arm the evacuation countdown. Ignored while one is already running."""
        _require(source, COMMAND_SOURCES, "source")
        seconds = int(get_simulation_parameters().get('evacuation_seconds'))
        if source == 'HMI':
            self._click()

        def arm(state):
            new_state, armed = evacuation.arm(state, seconds)
            return new_state if armed else None

        applied = self._engine.apply_command(
            source, 'arresto_controllato', 'Avviata procedura di arresto controllato.', arm)
        if not applied:
            logger.info(f"Shutdown from {source} ignored: evacuation already counting down")
        return applied

    def reset(self) -> bool:
        self._engine.reset('TRAINER')
        return True

    def toggle(self, key: str) -> bool:
        _require(key, TOGGLE_KEYS, "toggle")
        return self._engine.apply_command(
            'TRAINER', f'toggle_{key}',
            lambda s: f'Stato {key} impostato a {str(getattr(s, key)).lower()}',
            lambda s: environment.toggle(s, key))

    def set_slider(self, key: str, value) -> bool:
        """
        Overwrite a reading. Bounds are advisory; what happens outside them
        depends on the configured slider policy (accept, clamp or reject).
        """
        _require(key, SLIDER_KEYS, "slider")
        value = self._bounded(key, _number(value, key))
        return self._engine.apply_command(
            'TRAINER', f'set_{key}', f'{key} impostato a {value}',
            lambda s: environment.set_reading(s, key, value))

    def set_threshold(self, key: str, value) -> bool:
        _require(key, THRESHOLD_KEYS, "threshold")
        value = self._bounded(key, _number(value, key))
        return self._engine.apply_command(
            'TRAINER', f'set_{key}', f'Soglia {key} impostata a {value}',
            lambda s: s.with_changes(**{key: value}))

    def clear_alarm(self, code: str) -> bool:
        _require(code, alarms.ALARM_CODES, "alarm code")
        return self._engine.apply_command(
            'TRAINER', 'clear_alarm', f'Allarme {code} cancellato manualmente.',
            lambda s: alarms.clear(s, code), recompute=False)

    def simulate_comms_loss(self) -> bool:
        self._engine.begin_comms_loss('TRAINER')
        return True

    # --- HMI commands ---

    def request_support(self) -> bool:
        self._click()
        self._engine.record_event('HMI', 'request_support', 'Richiesta di supporto inviata.')
        return True

    # --- Process-wide ---

    def set_muted(self, muted: bool) -> bool:
        audio = self._engine.audio
        audio.set_muted(bool(muted))
        self._engine.record_event('SYSTEM', 'audio_toggle',
                                  'Audio disattivato' if audio.muted else 'Audio attivato')
        return True

    # --- Helpers ---

    def _bounded(self, key: str, value: float) -> float:
        params = get_simulation_parameters()
        if params.in_bounds(key, value):
            return value
        policy = params.slider_policy
        if policy == SliderPolicy.CLAMP:
            return params.clamp(key, value)
        if policy == SliderPolicy.REJECT:
            low, high = params.bounds(key)
            logger.warning(f"Rejected {key}={value}: outside [{low}, {high}]")
            raise CommandError(f"{key} must be between {low} and {high}")
        return value

    def _click(self) -> None:
        try:
            self._engine.audio.play(AudioCue.CLICK.value)
        except Exception as e:
            logger.warning(f"Click cue failed: {e}")
