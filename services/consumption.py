# backend/services/consumption.py

from dataclasses import dataclass

from services.telemetry import parse_number

DEFAULT_TARIFF_PER_KWH = 14.0

# Ratio between the prototype metering rig and a full classroom circuit.
DEFAULT_SCALE_FACTOR = 20.0


@dataclass(frozen=True)
class DeviceBreakdown:
    lighting: float
    projection: float
    computers: float
    hvac: float

    def to_dict(self):
        return {
            "lighting": self.lighting,
            "projection": self.projection,
            "computers": self.computers,
            "hvac": self.hvac,
        }


@dataclass(frozen=True)
class Consumption:
    prototype_kwh: float
    actual_kwh: float
    prototype_cost: float
    actual_cost: float
    device_breakdown: DeviceBreakdown

    def to_dict(self):
        return {
            "prototype_kwh": self.prototype_kwh,
            "actual_kwh": self.actual_kwh,
            "prototype_cost": self.prototype_cost,
            "actual_cost": self.actual_cost,
            "device_breakdown": self.device_breakdown.to_dict(),
        }


def equal_split(kwh):
    """
    Placeholder allocation: a quarter of the room's energy per category.
    There is no per-device metering behind it.
    """
    share = kwh / 4.0
    return DeviceBreakdown(lighting=share, projection=share, computers=share, hvac=share)


def compute(sample, duration, tariff_per_kwh=DEFAULT_TARIFF_PER_KWH,
            scale_factor=DEFAULT_SCALE_FACTOR, allocate=equal_split):
    """
    Turn one sample and a session length into energy and cost figures.

    Never raises: bad numbers anywhere in the inputs count as 0.
    """
    tariff = parse_number(tariff_per_kwh)
    scale = parse_number(scale_factor)
    hours = parse_number(getattr(duration, "total_hours", 0.0))

    prototype_kwh = parse_number(sample.billable_energy_kwh) if sample is not None else 0.0
    actual_kwh = prototype_kwh * scale

    return Consumption(
        prototype_kwh=prototype_kwh,
        actual_kwh=actual_kwh,
        prototype_cost=prototype_kwh * tariff * hours,
        actual_cost=actual_kwh * tariff * hours,
        device_breakdown=allocate(actual_kwh),
    )
