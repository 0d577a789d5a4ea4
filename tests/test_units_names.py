import pytest

from f1timing.analysis.name_utils import DRIVERS, UNKNOWN_DRIVER, driver_code, team_name, tyre_name
from f1timing.analysis.units import (
    SpeedUnit,
    SpeedUnitSetting,
    convert_speed,
    format_distance,
    format_speed,
)


def test_known_and_unknown_driver_codes():
    assert driver_code(9) == "HAM"
    assert driver_code(0) == "VET"
    assert driver_code(99) == UNKNOWN_DRIVER == "???"


def test_team_and_tyre_names():
    assert team_name(4) == "Mercedes"
    assert team_name(42) == ""
    assert tyre_name(0) == "Ultra Soft"
    assert tyre_name(6) == "Wet"
    assert tyre_name(7) == ""


def test_lookup_tables_are_read_only():
    with pytest.raises(TypeError):
        DRIVERS[99] = "NEW"


def test_speed_conversion_and_formatting():
    assert convert_speed(10.0, SpeedUnit.KPH) == pytest.approx(36.0)
    assert format_speed(40.0, SpeedUnit.KPH) == "144 km/h"
    assert format_speed(40.0, SpeedUnit.MPH) == "89 mph"


def test_distance_formatting():
    assert format_distance(5303.0, SpeedUnit.KPH) == "5.3km"
    assert format_distance(5303.0, SpeedUnit.MPH) == "3.3mi"


def test_parse_speed_unit():
    assert SpeedUnit.parse(" MPH ") is SpeedUnit.MPH
    assert SpeedUnit.parse("kph") is SpeedUnit.KPH
    with pytest.raises(ValueError):
        SpeedUnit.parse("knots")


def test_unit_setting_toggles():
    setting = SpeedUnitSetting()
    assert setting.unit is SpeedUnit.KPH
    assert setting.toggle() is SpeedUnit.MPH
    assert setting.toggle() is SpeedUnit.KPH
    setting.set(SpeedUnit.MPH)
    assert setting.unit is SpeedUnit.MPH


def test_non_finite_speed_and_distance_render_blank():
    assert format_speed(float("nan"), SpeedUnit.KPH) == ""
    assert format_speed(float("-inf"), SpeedUnit.MPH) == ""
    assert format_distance(float("inf"), SpeedUnit.KPH) == ""
