import math

import pytest

from plantsim import (
    CommandError, CommandSurface, ComponentStatus, PlantStatus, SliderPolicy, initial_state
)

from conftest import advance, events


def test_start_default_scenario(engine, commands):
    assert commands.start_scenario()
    s = engine.state
    assert s.scenario == 3
    assert s.plant_status == PlantStatus.RUNNING
    assert (s.ventilation, s.gas_analysis, s.lighting) == (ComponentStatus.ON,) * 3
    assert (s.o2, s.co, s.ch4_lel, s.pressure, s.temperature) == (20.7, 8, 0.3, 1.02, 19.0)
    assert s.active_alarms == ()
    assert events(engine) == ['start_scenario_3']


def test_scenario_start_keeps_log(engine, commands):
    commands.toggle('loto')
    commands.start_scenario(3)
    assert events(engine) == ['start_scenario_3', 'toggle_loto']


@pytest.mark.parametrize("scenario_id", [99, "tre", None])
def test_unknown_scenario_rejected(engine, commands, scenario_id):
    with pytest.raises(CommandError):
        commands.start_scenario(scenario_id)
    assert engine.state == initial_state()
    assert engine.log_entries() == []


def test_inject_fault(engine, commands):
    commands.inject_fault('lighting')
    assert engine.state.lighting == ComponentStatus.FAULT
    entry = engine.log_entries()[0]
    assert (entry['source'], entry['event']) == ('TRAINER', 'inject_fault_lighting')
    assert entry['timestamp'] == "12:00:00"


@pytest.mark.parametrize("call", [
    lambda c: c.inject_fault('pump'),
    lambda c: c.toggle('ventilation'),
    lambda c: c.set_slider('humidity', 3),
    lambda c: c.set_slider('o2', 'twenty'),
    lambda c: c.set_slider('o2', math.nan),
    lambda c: c.set_slider('co', math.inf),
    lambda c: c.set_threshold('thr_pressure', 1),
    lambda c: c.controlled_shutdown('STUDENT'),
])
def test_invalid_arguments_change_nothing(engine, commands, call):
    with pytest.raises(CommandError):
        call(commands)
    assert engine.state == initial_state()
    assert engine.log_entries() == []


@pytest.mark.parametrize("key", ['auto_ramp', 'e_stop', 'loto'])
def test_toggle_flips_and_logs_new_value(engine, commands, key):
    commands.toggle(key)
    assert getattr(engine.state, key) is True
    assert engine.log_entries()[0]['detail'] == f'Stato {key} impostato a true'

    commands.toggle(key)
    assert getattr(engine.state, key) is False
    assert engine.log_entries()[0]['detail'] == f'Stato {key} impostato a false'
    assert events(engine) == [f'toggle_{key}'] * 2


def test_e_stop_raises_emergency_flag(engine, commands):
    commands.toggle('e_stop')
    assert engine.snapshot()['is_emergency']


def test_slider_overwrites_reading(engine, commands):
    commands.set_slider('temperature', 25.5)
    commands.set_slider('co', '12.4')
    assert engine.state.temperature == 25.5
    assert engine.state.co == 12.4
    assert events(engine) == ['set_co', 'set_temperature']


def test_fractional_co_just_over_threshold_alarms(running_engine):
    commands = CommandSurface(running_engine)
    commands.set_slider('co', 30.4)
    assert running_engine.state.co == 30.4
    assert running_engine.state.alarm_codes() == ('CO_HIGH',)


def test_out_of_range_slider_accepted_by_default(engine, commands):
    commands.set_slider('o2', 30)
    assert engine.state.o2 == 30


def test_clamp_policy(engine, commands, clean_parameters):
    clean_parameters.slider_policy = SliderPolicy.CLAMP
    commands.set_slider('o2', 30)
    commands.set_slider('pressure', 0.1)
    assert engine.state.o2 == 22.0
    assert engine.state.pressure == 0.8


def test_reject_policy(engine, commands, clean_parameters):
    clean_parameters.slider_policy = 'reject'
    with pytest.raises(CommandError):
        commands.set_slider('ch4_lel', 7)
    assert engine.state.ch4_lel == 0.1
    assert engine.log_entries() == []

    commands.set_slider('ch4_lel', 4.5)
    assert engine.state.ch4_lel == 4.5


def test_policy_read_from_environment(monkeypatch, clean_parameters):
    monkeypatch.setenv("SLIDER_POLICY", "Clamp")
    clean_parameters.reset()
    assert clean_parameters.slider_policy == SliderPolicy.CLAMP


def test_threshold_change_recomputes_alarms(running_engine):
    commands = CommandSurface(running_engine)
    commands.set_threshold('thr_co_high', 4)
    assert running_engine.state.thr_co_high == 4
    assert running_engine.state.alarm_codes() == ('CO_HIGH',)
    assert events(running_engine)[:2] == ['allarme_generato', 'set_thr_co_high']


def test_reset_twice_gives_same_state_and_single_entry(engine, commands):
    commands.start_scenario(3)
    commands.inject_fault('ventilation')
    commands.toggle('auto_ramp')
    commands.controlled_shutdown('TRAINER')
    advance(engine, 5)

    commands.reset()
    first = engine.state
    commands.reset()

    assert engine.state == first == initial_state()
    assert events(engine) == ['reset_impianto']
    assert engine.log_entries()[0]['source'] == 'TRAINER'


def test_reset_takes_thresholds_from_parameters(engine, commands, clean_parameters):
    clean_parameters.set('thr_o2_low', 18.0)
    commands.reset()
    assert engine.state.thr_o2_low == 18.0


def test_hmi_shutdown_plays_click(engine, commands, audio):
    commands.controlled_shutdown('HMI')
    cues = [c['cue'] for c in audio.drain()]
    assert cues[0] == 'click'
    assert engine.log_entries()[0]['source'] == 'HMI'


def test_request_support_changes_no_state(engine, commands, audio):
    before = engine.state
    assert commands.request_support()
    assert engine.state is before
    entry = engine.log_entries()[0]
    assert (entry['source'], entry['event']) == ('HMI', 'request_support')
    assert [c['cue'] for c in audio.drain()] == ['click']


def test_mute_is_logged_and_reported(engine, commands):
    commands.set_muted(True)
    assert engine.snapshot()['audio_muted']
    assert engine.log_entries()[0]['detail'] == 'Audio disattivato'

    commands.set_muted(False)
    assert not engine.snapshot('hmi')['audio_muted']
    assert engine.log_entries()[0]['detail'] == 'Audio attivato'


def test_muted_cues_are_dropped(engine, commands, audio):
    commands.set_muted(True)
    commands.request_support()
    commands.controlled_shutdown('TRAINER')
    assert audio.drain() == []
