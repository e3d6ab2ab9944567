import logging

from plantsim import CommandSurface, CueBus, TrainingEngine


def cues(bus):
    return [c["cue"] for c in bus.drain()]


def test_cues_are_queued_in_order():
    bus = CueBus()
    bus.play("warning")
    bus.play("critical")
    drained = bus.drain()
    assert [c["cue"] for c in drained] == ["warning", "critical"]
    assert drained[0]["seq"] < drained[1]["seq"]
    assert bus.drain() == []


def test_unknown_cue_is_ignored(caplog):
    bus = CueBus()
    with caplog.at_level(logging.WARNING, logger="AudioCues"):
        bus.play("fanfare")
    assert cues(bus) == []
    assert "fanfare" in caplog.text


def test_loop_start_and_stop_are_idempotent():
    bus = CueBus()
    bus.start_loop()
    bus.start_loop()
    bus.stop_loop()
    bus.stop_loop()
    assert cues(bus) == ["evacuation-loop-start", "evacuation-loop-stop"]


def test_mute_stops_loop_and_drops_cues():
    bus = CueBus()
    bus.start_loop()
    bus.set_muted(True)
    bus.play("critical")
    bus.start_loop()

    assert not bus.loop_active
    assert cues(bus) == ["evacuation-loop-start", "evacuation-loop-stop"]

    bus.set_muted(False)
    bus.play("click")
    assert cues(bus) == ["click"]


def test_failing_listener_does_not_propagate(caplog):
    bus = CueBus()
    heard = []

    def broken(cue):
        raise RuntimeError("device unplugged")

    bus.add_listener(broken)
    bus.add_listener(heard.append)
    with caplog.at_level(logging.WARNING, logger="AudioCues"):
        bus.play("warning")

    assert heard == ["warning"]
    assert "device unplugged" in caplog.text


def test_queue_is_bounded():
    bus = CueBus(max_queued=3)
    for _ in range(5):
        bus.play("click")
    drained = bus.drain()
    assert len(drained) == 3
    assert drained[-1]["seq"] == 5


def test_engine_survives_broken_audio_sink():
    class BrokenSink(CueBus):
        def play(self, cue):
            raise RuntimeError("no sound card")

        def start_loop(self):
            raise RuntimeError("no sound card")

    eng = TrainingEngine(audio=BrokenSink())
    surface = CommandSurface(eng)
    surface.start_scenario(3)
    surface.set_slider("ch4_lel", 3.0)
    surface.controlled_shutdown("HMI")

    assert eng.state.alarm_codes() == ("GAS_HIGH",)
    assert eng.state.evacuation_timer == 120
