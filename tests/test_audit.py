import logging

from plantsim import AuditLog, LogEntry


def test_entries_are_most_recent_first():
    ticks = iter(["10:00:00", "10:00:01"])
    log = AuditLog(clock=lambda: next(ticks))
    log.record("TRAINER", "toggle_loto", "Stato loto impostato a true")
    log.record("SYSTEM", "evacuazione_fine", "Timer a 0, comandi bloccati.")

    assert [e.event for e in log.entries()] == ["evacuazione_fine", "toggle_loto"]
    assert log.entries()[1] == LogEntry("10:00:00", "TRAINER", "toggle_loto",
                                        "Stato loto impostato a true")
    assert len(log) == 2


def test_entries_returns_a_copy():
    log = AuditLog(clock=lambda: "00:00:00")
    log.record("HMI", "request_support", "x")
    log.entries().clear()
    assert len(log) == 1


def test_default_timestamp_format():
    log = AuditLog()
    stamp = log.record("SYSTEM", "gas_tick", "").timestamp
    assert len(stamp) == 8 and stamp[2] == stamp[5] == ":"


def test_find_and_clear():
    log = AuditLog(clock=lambda: "00:00:00")
    log.record("SYSTEM", "gas_tick", "a")
    log.record("SYSTEM", "comms_restored", "b")
    log.record("SYSTEM", "gas_tick", "c")
    assert [e.detail for e in log.find("gas_tick")] == ["c", "a"]

    log.clear()
    assert log.entries() == []


def test_entries_are_mirrored_to_process_log(caplog):
    log = AuditLog(clock=lambda: "00:00:00")
    with caplog.at_level(logging.INFO, logger="AuditLog"):
        log.record("TRAINER", "reset_impianto", "Simulazione resettata allo stato iniziale.")
    assert "[TRAINER] reset_impianto" in caplog.text


def test_to_dict_keys():
    entry = LogEntry("12:00:00", "HMI", "arresto_controllato", "d")
    assert entry.to_dict() == {
        "timestamp": "12:00:00", "source": "HMI", "event": "arresto_controllato", "detail": "d"
    }
