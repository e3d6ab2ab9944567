import logging
import os
import threading
from typing import Dict, Optional, Tuple

from .types import SliderPolicy

logger = logging.getLogger("SimulationParameters")

class SimulationParameters:
    """
    Global simulation parameters for the confined-space trainer.
    Holds alarm threshold defaults, advisory slider bounds for each reading
    and the timing constants of the evacuation and comms-loss sequences.
    """

    # Default parameter values
    DEFAULTS = {
        # Slider bounds (advisory, the engine only enforces them per policy)
        'o2': {
            'value': 20.9,
            'min': 15.0,
            'max': 22.0,
            'step': 0.1,
            'unit': '%',
            'description': 'Oxygen concentration',
            'category': 'sensor'
        },
        'co': {
            'value': 5.0,
            'min': 0.0,
            'max': 100.0,
            'step': 1.0,
            'unit': 'ppm',
            'description': 'Carbon monoxide concentration',
            'category': 'sensor'
        },
        'ch4_lel': {
            'value': 0.1,
            'min': 0.0,
            'max': 5.0,
            'step': 0.1,
            'unit': '% LEL',
            'description': 'Methane as percentage of the lower explosive limit',
            'category': 'sensor'
        },
        'pressure': {
            'value': 1.01,
            'min': 0.8,
            'max': 1.2,
            'step': 0.01,
            'unit': 'bar',
            'description': 'Ambient pressure inside the confined space',
            'category': 'sensor'
        },
        'temperature': {
            'value': 18.0,
            'min': -10.0,
            'max': 40.0,
            'step': 0.1,
            'unit': '°C',
            'description': 'Ambient temperature inside the confined space',
            'category': 'sensor'
        },

        # Alarm thresholds
        'thr_o2_low': {
            'value': 19.5,
            'min': 15.0,
            'max': 22.0,
            'step': 0.1,
            'unit': '%',
            'description': 'O2 below this raises O2_LOW (WARN)',
            'category': 'threshold'
        },
        'thr_co_high': {
            'value': 30.0,
            'min': 0.0,
            'max': 100.0,
            'step': 1.0,
            'unit': 'ppm',
            'description': 'CO above this raises CO_HIGH (WARN)',
            'category': 'threshold'
        },
        'thr_ch4_lel_high': {
            'value': 1.0,
            'min': 0.0,
            'max': 5.0,
            'step': 0.1,
            'unit': '% LEL',
            'description': 'CH4 above this raises GAS_HIGH (CRITICAL)',
            'category': 'threshold'
        },

        # Sequencing
        'evacuation_seconds': {
            'value': 120.0,
            'min': 10.0,
            'max': 600.0,
            'step': 1.0,
            'unit': 's',
            'description': 'Evacuation countdown armed by a controlled shutdown',
            'category': 'sequence'
        },
        'comms_loss_seconds': {
            'value': 10.0,
            'min': 1.0,
            'max': 120.0,
            'step': 1.0,
            'unit': 's',
            'description': 'Duration of the simulated HMI communications loss',
            'category': 'sequence'
        },
    }

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Singleton pattern for global parameters."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._params = {}
        self._slider_policy = self._policy_from_env()
        self._reset_to_defaults()
        self._initialized = True

    @staticmethod
    def _policy_from_env() -> SliderPolicy:
        raw = os.environ.get("SLIDER_POLICY", SliderPolicy.ACCEPT.value).strip().lower()
        try:
            return SliderPolicy(raw)
        except ValueError:
            logger.warning(f"Unknown SLIDER_POLICY '{raw}', falling back to accept")
            return SliderPolicy.ACCEPT

    @property
    def slider_policy(self) -> SliderPolicy:
        return self._slider_policy

    @slider_policy.setter
    def slider_policy(self, value):
        self._slider_policy = SliderPolicy(value)
        logger.info(f"Slider bound policy changed to {self._slider_policy.value}")

    def bounds(self, key: str) -> Optional[Tuple[float, float]]:
        """Get the (min, max) slider range for a key."""
        entry = self.DEFAULTS.get(key)
        if entry is None:
            return None
        return entry['min'], entry['max']

    def in_bounds(self, key: str, value: float) -> bool:
        rng = self.bounds(key)
        if rng is None:
            return True
        return rng[0] <= value <= rng[1]

    def clamp(self, key: str, value: float) -> float:
        rng = self.bounds(key)
        if rng is None:
            return value
        return max(rng[0], min(rng[1], value))

    def _reset_to_defaults(self):
        """Reset all parameters to default values."""
        for key, entry in self.DEFAULTS.items():
            self._params[key] = entry['value']

    def get(self, key: str) -> float:
        """Get a parameter value."""
        return self._params.get(key, self.DEFAULTS.get(key, {}).get('value', 0.0))

    def set(self, key: str, value: float) -> bool:
        """Set a parameter value with validation."""
        if key not in self.DEFAULTS:
            return False
        # Clamp to valid range
        value = self.clamp(key, float(value))
        self._params[key] = value
        logger.info(f"Simulation parameter '{key}' set to {value}")
        return True

    def get_all(self) -> Dict[str, Dict]:
        """Get all parameters with their current values and metadata."""
        result = {}
        for key, entry in self.DEFAULTS.items():
            result[key] = {
                'value': self._params.get(key, entry['value']),
                'default': entry['value'],
                'min': entry['min'],
                'max': entry['max'],
                'step': entry['step'],
                'unit': entry['unit'],
                'description': entry['description'],
                'category': entry['category']
            }
        return result

    def get_by_category(self) -> Dict[str, Dict]:
        """Get parameters grouped by category."""
        result = {}
        for key, info in self.get_all().items():
            cat = info.pop('category')
            result.setdefault(cat, {})[key] = info
        return result

    def set_multiple(self, params: Dict[str, float]) -> Dict[str, bool]:
        """Set multiple parameters at once."""
        results = {}
        for key, value in params.items():
            results[key] = self.set(key, value)
        return results

    def reset(self, key: str = None):
        """Reset parameter(s) to default."""
        if key is None:
            self._reset_to_defaults()
            self._slider_policy = self._policy_from_env()
        elif key in self.DEFAULTS:
            self._params[key] = self.DEFAULTS[key]['value']


def get_simulation_parameters() -> SimulationParameters:
    """Get the global simulation parameters instance."""
    return SimulationParameters()
