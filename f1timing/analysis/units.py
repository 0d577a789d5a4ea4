"""Speed/distance unit conversion for display, plus the user's unit preference."""

import math
from enum import Enum


class SpeedUnit(Enum):
    MPH = "mph"
    KPH = "kph"

    @classmethod
    def parse(cls, value: str) -> "SpeedUnit":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown speed unit {value!r}; expected 'kph' or 'mph'") from None


# m/s -> unit, metres -> unit
_SPEED_FACTORS = {SpeedUnit.MPH: 2.23694, SpeedUnit.KPH: 3.6}
_DISTANCE_FACTORS = {SpeedUnit.MPH: 1609.34, SpeedUnit.KPH: 1000.0}
_SPEED_LABELS = {SpeedUnit.MPH: "mph", SpeedUnit.KPH: "km/h"}
_DISTANCE_LABELS = {SpeedUnit.MPH: "mi", SpeedUnit.KPH: "km"}


def convert_speed(mps: float, unit: SpeedUnit) -> float:
    return mps * _SPEED_FACTORS[unit]


def format_speed(mps: float, unit: SpeedUnit) -> str:
    speed = convert_speed(mps, unit)
    if not math.isfinite(speed):
        return ""
    return f"{int(speed)} {_SPEED_LABELS[unit]}"


def format_distance(metres: float, unit: SpeedUnit) -> str:
    if not math.isfinite(metres):
        return ""
    return f"{metres / _DISTANCE_FACTORS[unit]:.1f}{_DISTANCE_LABELS[unit]}"


class SpeedUnitSetting:
    """Mutable display preference; toggled from the overlay, saved in settings.ini."""

    def __init__(self, unit: SpeedUnit = SpeedUnit.KPH):
        self._unit = unit

    @property
    def unit(self) -> SpeedUnit:
        return self._unit

    def set(self, unit: SpeedUnit) -> None:
        self._unit = unit

    def toggle(self) -> SpeedUnit:
        self._unit = SpeedUnit.KPH if self._unit is SpeedUnit.MPH else SpeedUnit.MPH
        return self._unit
