"""
Scenario catalog: start-state snapshots loaded from YAML definitions.
"""
import os
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml

from .state import SimulationState, initial_state
from .types import PlantStatus, ComponentStatus, CommsStatus

logger = logging.getLogger("ScenarioCatalog")

SCENARIO_DIR = os.path.join(os.path.dirname(__file__), 'scenario_defs')

_ENUM_FIELDS = {
    'plant_status': PlantStatus,
    'ventilation': ComponentStatus,
    'gas_analysis': ComponentStatus,
    'lighting': ComponentStatus,
    'comms_status': CommsStatus,
}
# Derived or engine-owned fields a scenario may not author
_FORBIDDEN_FIELDS = {'scenario', 'active_alarms', 'evacuation_timer'}


class ScenarioError(ValueError):
    pass


@dataclass
class Scenario:
    id: int
    name: str
    description: str = ""
    state: Dict[str, Any] = field(default_factory=dict)
    config_file: str = ""

    def build(self) -> SimulationState:
        """Start snapshot: the initial state with this scenario's overrides."""
        return initial_state().with_changes(scenario=self.id, **self.state)


def _coerce_state(raw: Dict[str, Any], source: str) -> Dict[str, Any]:
    known = {f.name for f in fields(SimulationState)}
    result = {}
    for key, value in (raw or {}).items():
        if key not in known or key in _FORBIDDEN_FIELDS:
            raise ScenarioError(f"{source}: unknown or read-only state key '{key}'")
        enum_cls = _ENUM_FIELDS.get(key)
        if enum_cls is not None:
            try:
                value = enum_cls(str(value))
            except ValueError:
                raise ScenarioError(f"{source}: invalid value '{value}' for '{key}'")
        result[key] = value
    return result


class ScenarioCatalog:
    """Loads every *.yaml / *.yml file of a directory, keyed by scenario id."""

    def __init__(self, directory: str = SCENARIO_DIR):
        self._directory = directory
        self._scenarios: Dict[int, Scenario] = {}
        self.reload()

    def reload(self) -> None:
        self._scenarios = {}
        if not os.path.exists(self._directory):
            logger.warning(f"Scenario directory not found: {self._directory}")
            return

        for filename in sorted(os.listdir(self._directory)):
            if not (filename.endswith('.yaml') or filename.endswith('.yml')):
                continue
            file_path = os.path.join(self._directory, filename)
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}

            scenario = Scenario(
                id=int(data['id']),
                name=data.get('name', f"Scenario {data['id']}"),
                description=(data.get('description') or '').strip(),
                state=_coerce_state(data.get('state'), filename),
                config_file=filename,
            )
            self._scenarios[scenario.id] = scenario
            logger.info(f"Loaded scenario {scenario.id}: {scenario.name} from {filename}")

    def get(self, scenario_id: int) -> Optional[Scenario]:
        return self._scenarios.get(scenario_id)

    def ids(self) -> List[int]:
        return sorted(self._scenarios)

    def describe(self) -> List[Dict[str, Any]]:
        return [
            {'id': s.id, 'name': s.name, 'description': s.description}
            for s in (self._scenarios[i] for i in self.ids())
        ]
