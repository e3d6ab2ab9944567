from enum import Enum

class PlantStatus(Enum):
    OFF = "OFF"
    READY = "READY"
    RUNNING = "RUNNING"

class ComponentStatus(Enum):
    ON = "ON"
    OFF = "OFF"
    FAULT = "FAULT"

class CommsStatus(Enum):
    NORMAL = "NORMAL"
    DEGRADED = "DEGRADED"
    LOST = "LOST"

class Severity(Enum):
    WARN = "WARN"
    CRITICAL = "CRITICAL"

class Viewpoint(Enum):
    TRAINER = "trainer"
    HMI = "hmi"

class SliderPolicy(Enum):
    ACCEPT = "accept"
    CLAMP = "clamp"
    REJECT = "reject"

class AudioCue(Enum):
    WARNING = "warning"
    CRITICAL = "critical"
    CLICK = "click"
    EVACUATION_LOOP_START = "evacuation-loop-start"
    EVACUATION_LOOP_STOP = "evacuation-loop-stop"

# Command argument vocabularies
COMPONENTS = ("ventilation", "gas_analysis", "lighting")
TOGGLE_KEYS = ("auto_ramp", "e_stop", "loto")
SLIDER_KEYS = ("o2", "co", "ch4_lel", "pressure", "temperature")
THRESHOLD_KEYS = ("thr_o2_low", "thr_co_high", "thr_ch4_lel_high")
COMMAND_SOURCES = ("TRAINER", "HMI")
