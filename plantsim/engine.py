import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Union

from interfaces import AudioSink, SnapshotProvider, Tickable
from . import alarms, environment, evacuation
from .audio import CueBus
from .audit import AuditLog, LogEntry
from .clock import Ticker
from .overrides import ViewOverrideManager
from .parameters import get_simulation_parameters
from .scenarios import ScenarioCatalog
from .state import SimulationState, initial_state
from .timers import TaskScheduler
from .types import AudioCue, CommsStatus, Severity, Viewpoint

logger = logging.getLogger("TrainingEngine")

COMMS_RESTORE_TASK = "comms_restore"

Transition = Callable[[SimulationState], Optional[SimulationState]]


class TrainingEngine(Tickable, SnapshotProvider):
    """
    Owns the simulation state and serializes every transition through one
    lock. Commands arrive through CommandSurface; the Ticker drives tick().
    """

    def __init__(self,
                 audio: AudioSink = None,
                 catalog: ScenarioCatalog = None,
                 audit_clock: Callable[[], str] = None,
                 tick_interval: float = None):
        self._audio = audio or CueBus()
        self._catalog = catalog or ScenarioCatalog()
        self._audit = AuditLog(clock=audit_clock)
        self._scheduler = TaskScheduler()
        self._overlay = ViewOverrideManager()
        self._state: SimulationState = initial_state()
        self._tick_count = 0
        self._lock = threading.RLock()
        self._ticker = Ticker(self.tick, tick_interval)

    @property
    def state(self) -> SimulationState:
        """Current canonical state (immutable)."""
        with self._lock:
            return self._state

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def audio(self) -> AudioSink:
        return self._audio

    @property
    def audit(self) -> AuditLog:
        return self._audit

    @property
    def catalog(self) -> ScenarioCatalog:
        return self._catalog

    @property
    def scheduler(self) -> TaskScheduler:
        return self._scheduler

    @property
    def overlay(self) -> ViewOverrideManager:
        return self._overlay

    @property
    def ticker(self) -> Ticker:
        return self._ticker

    # --- Lifecycle ---

    def start(self) -> None:
        """Start the 1-second tick cadence."""
        self._ticker.start()
        logger.info("Training Engine Started")

    def stop(self) -> None:
        self._ticker.stop()
        self._audio.stop_loop()
        logger.info("Training Engine Stopped")

    # --- Tick ---

    def tick(self) -> None:
        """Advance drift, countdown, alarms and scheduled tasks by one second."""
        with self._lock:
            self._tick_count += 1
            state = self._state

            state, ramp_detail = environment.apply_auto_ramp(state)
            if ramp_detail:
                self._audit.record('AUTO_RAMP', 'gas_tick', ramp_detail)

            state, finished = evacuation.countdown(state)
            if finished:
                self._audit.record('SYSTEM', 'evacuazione_fine', 'Timer a 0, comandi bloccati.')

            self._commit(state)
            self._scheduler.run_due(self._tick_count)

    # --- Command primitives (used by CommandSurface) ---

    def apply_command(self, source: str, event: str,
                      detail: Union[str, Callable[[SimulationState], str]],
                      transition: Transition, recompute: bool = True) -> bool:
        """
        Apply a state transition on behalf of a command and log it.
        A transition returning None declines: nothing is changed or logged.
        ``detail`` may be a callable rendering the message from the new state.
        With recompute=False the alarm set is stored as the transition left it
        until the next tick recomputes it.
        """
        with self._lock:
            new_state = transition(self._state)
            if new_state is None:
                return False
            if callable(detail):
                detail = detail(new_state)
            self._audit.record(source, event, detail)
            if recompute:
                self._commit(new_state)
            else:
                self._state = new_state
            return True

    def record_event(self, source: str, event: str, detail: str) -> LogEntry:
        """Log an event that does not touch simulation state."""
        with self._lock:
            return self._audit.record(source, event, detail)

    def begin_comms_loss(self, source: str = 'TRAINER') -> None:
        """
        Freeze HMI comms as LOST for ``comms_loss_seconds`` ticks.
        A request during an active freeze restarts the window.
        """
        seconds = int(get_simulation_parameters().get('comms_loss_seconds'))
        with self._lock:
            self._audit.record(source, 'sim_comms_loss',
                               f'Simulazione perdita comunicazione per {seconds}s.')
            self._overlay.set_override(Viewpoint.HMI.value, 'comms_status',
                                       CommsStatus.LOST.value, tick=self._tick_count,
                                       source=source)
            self._scheduler.schedule(COMMS_RESTORE_TASK, self._tick_count + seconds,
                                     self._restore_comms)

    @property
    def comms_loss_active(self) -> bool:
        return self._overlay.is_active(Viewpoint.HMI.value, 'comms_status')

    def reset(self, source: str = 'TRAINER') -> None:
        """
        Restore the initial state, drop the log and every pending task, and
        restart the tick cadence. Idempotent.
        """
        with self._lock:
            self._scheduler.cancel_all()
            self._overlay.clear()
            self._safe_audio(self._audio.stop_loop)
            self._state = initial_state()
            self._audit.clear()
            self._audit.record(source, 'reset_impianto', 'Simulazione resettata allo stato iniziale.')
        # Outside the lock: the ticker thread may be waiting on it
        self._ticker.restart()

    def load_scenario(self, scenario_id: int) -> bool:
        scenario = self._catalog.get(scenario_id)
        if scenario is None:
            return False
        with self._lock:
            self._audit.record('TRAINER', f'start_scenario_{scenario.id}',
                               f'Stato iniziale scenario {scenario.id} caricato.')
            self._commit(scenario.build())
        return True

    # --- Read side ---

    def snapshot(self, viewpoint: str = "trainer") -> Dict[str, Any]:
        """JSON-ready state as observed from ``viewpoint`` (trainer or hmi)."""
        vp = Viewpoint(viewpoint)
        with self._lock:
            data = self._state.to_dict()
            data['tick'] = self._tick_count
            data['audio_muted'] = self._audio.muted
            if vp == Viewpoint.TRAINER:
                data['comms_loss_active'] = self.comms_loss_active
                return data
            return self._overlay.apply(vp.value, data)

    def log_entries(self) -> List[Dict[str, str]]:
        return [e.to_dict() for e in self._audit.entries()]

    # --- Internals ---

    def _commit(self, state: SimulationState) -> None:
        """Store ``state`` after the alarm recompute step and sync the siren."""
        result = alarms.recompute(state)
        self._state = result.state

        if result.added is not None:
            added = result.added
            self._audit.record('SYSTEM', 'allarme_generato', f'{added.severity.value}: {added.code}')
            cue = AudioCue.CRITICAL if added.severity == Severity.CRITICAL else AudioCue.WARNING
            self._safe_audio(lambda: self._audio.play(cue.value))

        if self._state.evacuation_timer > 0:
            self._safe_audio(self._audio.start_loop)
        else:
            self._safe_audio(self._audio.stop_loop)

    def _restore_comms(self) -> None:
        self._overlay.release_override(Viewpoint.HMI.value, 'comms_status')
        self._audit.record('SYSTEM', 'comms_restored', 'Comunicazione ripristinata.')

    @staticmethod
    def _safe_audio(call: Callable[[], None]) -> None:
        try:
            call()
        except Exception as e:
            logger.warning(f"Audio cue failed: {e}")
