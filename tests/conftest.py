import pytest

from plantsim import (
    TrainingEngine, CommandSurface, CueBus, ScenarioCatalog, get_simulation_parameters
)


FIXED_TIME = "12:00:00"


@pytest.fixture(autouse=True)
def clean_parameters(monkeypatch):
    """Parameters are a process-wide singleton; start every test from defaults."""
    monkeypatch.delenv("SLIDER_POLICY", raising=False)
    params = get_simulation_parameters()
    params.reset()
    yield params
    params.reset()


@pytest.fixture
def audio():
    return CueBus()


@pytest.fixture
def engine(audio):
    return TrainingEngine(audio=audio, audit_clock=lambda: FIXED_TIME)


@pytest.fixture
def commands(engine):
    return CommandSurface(engine)


@pytest.fixture
def scenario_dir(tmp_path):
    """A catalog directory with a running plant at the initial readings."""
    (tmp_path / "scenario_1.yaml").write_text(
        "id: 1\n"
        "name: Marcia a regime\n"
        "state:\n"
        "  plant_status: RUNNING\n"
        "  ventilation: \"ON\"\n"
        "  gas_analysis: \"ON\"\n"
        "  lighting: \"ON\"\n",
        encoding="utf-8",
    )
    return str(tmp_path)


@pytest.fixture
def running_engine(audio, scenario_dir):
    """Engine whose catalog holds scenario 1, already started."""
    eng = TrainingEngine(audio=audio, catalog=ScenarioCatalog(scenario_dir),
                         audit_clock=lambda: FIXED_TIME)
    CommandSurface(eng).start_scenario(1)
    return eng


def advance(engine, ticks):
    for _ in range(ticks):
        engine.tick()


def events(engine):
    return [e['event'] for e in engine.log_entries()]
