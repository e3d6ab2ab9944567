import pytest

from plantsim import CommandSurface, ComponentStatus, PlantStatus, SimulationState
from plantsim.environment import apply_auto_ramp, ramp_active

from conftest import advance, events


def ramping_state(**changes):
    base = SimulationState(plant_status=PlantStatus.RUNNING,
                           ventilation=ComponentStatus.FAULT,
                           auto_ramp=True)
    return base.with_changes(**changes)


def test_single_ramp_step():
    state, detail = apply_auto_ramp(ramping_state())
    assert state.o2 == pytest.approx(20.88)
    assert state.co == 6
    assert state.ch4_lel == pytest.approx(0.12)
    assert detail == "o2=20.88% co=6ppm ch4=0.12%LEL"


@pytest.mark.parametrize("changes", [
    {'plant_status': PlantStatus.OFF},
    {'plant_status': PlantStatus.READY},
    {'ventilation': ComponentStatus.ON},
    {'ventilation': ComponentStatus.OFF},
    {'auto_ramp': False},
])
def test_any_closed_gate_freezes_drift(changes):
    state = ramping_state(**changes)
    assert not ramp_active(state)
    new_state, detail = apply_auto_ramp(state)
    assert new_state is state
    assert detail is None


def test_o2_floor_and_ch4_ceiling():
    state, _ = apply_auto_ramp(ramping_state(o2=0.01, ch4_lel=99.99))
    assert state.o2 == 0.0
    assert state.ch4_lel == 100.0

    state, _ = apply_auto_ramp(state)
    assert state.o2 == 0.0
    assert state.ch4_lel == 100.0
    assert state.co == 7


def test_ramp_keeps_display_precision_over_many_ticks():
    state = ramping_state()
    for _ in range(50):
        state, _ = apply_auto_ramp(state)
    assert state.o2 == 19.9
    assert state.co == 55
    assert state.ch4_lel == 1.1
    assert isinstance(state.co, int)


def test_ramp_scenario_through_commands(running_engine):
    """Running plant at 20.9 / 5 / 0.1, ventilation fault, auto-ramp on."""
    commands = CommandSurface(running_engine)
    commands.inject_fault('ventilation')
    commands.toggle('auto_ramp')

    before = len(running_engine.log_entries())
    running_engine.tick()

    s = running_engine.state
    assert s.o2 == pytest.approx(20.88)
    assert s.co == 6
    assert s.ch4_lel == pytest.approx(0.12)

    entries = running_engine.log_entries()
    new_entries = entries[:len(entries) - before]
    assert [e['source'] for e in new_entries] == ['AUTO_RAMP']
    assert new_entries[0]['event'] == 'gas_tick'


def test_no_ramp_while_plant_off(engine, commands):
    commands.inject_fault('ventilation')
    commands.toggle('auto_ramp')
    advance(engine, 5)

    s = engine.state
    assert (s.o2, s.co, s.ch4_lel) == (20.9, 5, 0.1)
    assert 'gas_tick' not in events(engine)


def test_disabling_ramp_freezes_readings(running_engine):
    commands = CommandSurface(running_engine)
    commands.inject_fault('ventilation')
    commands.toggle('auto_ramp')
    advance(running_engine, 3)
    frozen = running_engine.state

    commands.toggle('auto_ramp')
    advance(running_engine, 3)
    assert running_engine.state.o2 == frozen.o2
    assert running_engine.state.co == frozen.co
    assert running_engine.state.ch4_lel == frozen.ch4_lel
