# backend/services/telemetry.py

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from utils.time import parse_timestamp


# ===============================
# Number Parsing
# ===============================
def parse_number(value):
    """
    Meter values arrive as decimal strings. Anything unparseable is 0.0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def _optional_number(value):
    if value is None:
        return None
    return parse_number(value)


# ===============================
# Telemetry Sample
# ===============================
@dataclass(frozen=True)
class TelemetrySample:
    current: float
    voltage: float
    power_watts: float
    frequency_hz: float
    power_factor: float
    energy_kwh: float
    calculated_energy_kwh: Optional[float] = None
    timestamp: Optional[datetime] = None
    raw_timestamp: Optional[str] = None
    session_duration_hours: Optional[float] = None

    @property
    def billable_energy_kwh(self):
        if self.calculated_energy_kwh is not None:
            return self.calculated_energy_kwh
        return self.energy_kwh

    def to_dict(self):
        return {
            "current": self.current,
            "voltage": self.voltage,
            "power_watts": self.power_watts,
            "frequency_hz": self.frequency_hz,
            "power_factor": self.power_factor,
            "energy_kwh": self.energy_kwh,
            "calculated_energy_kwh": self.calculated_energy_kwh,
            "timestamp": self.raw_timestamp,
            "session_duration_hours": self.session_duration_hours,
        }


# The meter firmware has written both camelCase and capitalised keys.
_FIELD_KEYS = {
    "current": ("current", "Current"),
    "voltage": ("voltage", "Voltage"),
    "power": ("power", "Power"),
    "frequency": ("frequency", "Frequency"),
    "power_factor": ("powerFactor", "PowerFactor"),
    "energy": ("energy", "Energy"),
    "calculated_energy": ("calculatedEnergy", "CalculatedEnergy"),
    "timestamp": ("timestamp", "Timestamp"),
    "session_duration": ("sessionDuration", "SessionDuration"),
}


def _field(raw, name):
    for key in _FIELD_KEYS[name]:
        if key in raw:
            return raw[key]
    return None


def sample_from_raw(raw):
    """
    Build a TelemetrySample from a raw `pzem` node.
    Returns None when the node is missing or not an object.
    """
    if not isinstance(raw, dict):
        return None

    raw_ts = _field(raw, "timestamp")
    if raw_ts is not None and not isinstance(raw_ts, str):
        raw_ts = str(raw_ts)

    return TelemetrySample(
        current=parse_number(_field(raw, "current")),
        voltage=parse_number(_field(raw, "voltage")),
        power_watts=parse_number(_field(raw, "power")),
        frequency_hz=parse_number(_field(raw, "frequency")),
        power_factor=parse_number(_field(raw, "power_factor")),
        energy_kwh=parse_number(_field(raw, "energy")),
        calculated_energy_kwh=_optional_number(_field(raw, "calculated_energy")),
        timestamp=parse_timestamp(raw_ts),
        raw_timestamp=raw_ts,
        session_duration_hours=_optional_number(_field(raw, "session_duration")),
    )
