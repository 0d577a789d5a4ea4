"""Decode the fixed-size telemetry packet sent by the game once per tick."""
from __future__ import annotations

import struct
from typing import Dict, List, Sequence, Tuple

from f1_core.model import CAR_CAPACITY, CarSnapshot, CarTable, TelemetryFrame


class DecodeError(ValueError):
    """Raised when a buffer does not match the fixed packet size."""
    pass


# (field name, element count, struct code). Order and widths follow the
# game's packed little-endian layout byte for byte.
FRAME_LAYOUT: Sequence[Tuple[str, int, str]] = (
    ("time", 1, "f"),
    ("lap_time", 1, "f"),
    ("lap_distance", 1, "f"),
    ("total_distance", 1, "f"),
    ("x", 1, "f"),
    ("y", 1, "f"),
    ("z", 1, "f"),
    ("speed", 1, "f"),
    ("xv", 1, "f"),
    ("yv", 1, "f"),
    ("zv", 1, "f"),
    ("xr", 1, "f"),
    ("yr", 1, "f"),
    ("zr", 1, "f"),
    ("xd", 1, "f"),
    ("yd", 1, "f"),
    ("zd", 1, "f"),
    ("susp_pos", 4, "f"),
    ("susp_vel", 4, "f"),
    ("wheel_speed", 4, "f"),
    ("throttle", 1, "f"),
    ("steer", 1, "f"),
    ("brake", 1, "f"),
    ("clutch", 1, "f"),
    ("gear", 1, "f"),
    ("gforce_lat", 1, "f"),
    ("gforce_lon", 1, "f"),
    ("lap", 1, "f"),
    ("engine_rate", 1, "f"),
    ("sli_pro_native_support", 1, "f"),
    ("car_position", 1, "f"),
    ("kers_level", 1, "f"),
    ("kers_max_level", 1, "f"),
    ("drs", 1, "f"),
    ("traction_control", 1, "f"),
    ("anti_lock_brakes", 1, "f"),
    ("fuel_in_tank", 1, "f"),
    ("fuel_capacity", 1, "f"),
    ("in_pits", 1, "f"),
    ("sector", 1, "f"),
    ("sector1_time", 1, "f"),
    ("sector2_time", 1, "f"),
    ("brakes_temp", 4, "f"),
    ("tyres_pressure", 4, "f"),
    ("team_info", 1, "f"),
    ("total_laps", 1, "f"),
    ("track_size", 1, "f"),
    ("last_lap_time", 1, "f"),
    ("max_rpm", 1, "f"),
    ("idle_rpm", 1, "f"),
    ("max_gears", 1, "f"),
    ("session_type", 1, "f"),
    ("drs_allowed", 1, "f"),
    ("track_number", 1, "f"),
    ("vehicle_fia_flags", 1, "f"),
    ("era", 1, "f"),
    ("engine_temperature", 1, "f"),
    ("gforce_vert", 1, "f"),
    ("ang_vel_x", 1, "f"),
    ("ang_vel_y", 1, "f"),
    ("ang_vel_z", 1, "f"),
    ("tyres_temperature", 4, "B"),
    ("tyres_wear", 4, "B"),
    ("tyre_compound", 1, "B"),
    ("front_brake_bias", 1, "B"),
    ("fuel_mix", 1, "B"),
    ("current_lap_invalid", 1, "B"),
    ("tyres_damage", 4, "B"),
    ("front_left_wing_damage", 1, "B"),
    ("front_right_wing_damage", 1, "B"),
    ("rear_wing_damage", 1, "B"),
    ("engine_damage", 1, "B"),
    ("gear_box_damage", 1, "B"),
    ("exhaust_damage", 1, "B"),
    ("pit_limiter_status", 1, "B"),
    ("pit_speed_limit", 1, "B"),
    ("session_time_left", 1, "f"),
    ("rev_lights_percent", 1, "B"),
    ("is_spectating", 1, "B"),
    ("spectator_car_index", 1, "B"),
    ("num_cars", 1, "B"),
    ("player_car_index", 1, "B"),
)

CAR_LAYOUT: Sequence[Tuple[str, int, str]] = (
    ("world_position", 3, "f"),
    ("last_lap_time", 1, "f"),
    ("current_lap_time", 1, "f"),
    ("best_lap_time", 1, "f"),
    ("sector1_time", 1, "f"),
    ("sector2_time", 1, "f"),
    ("lap_distance", 1, "f"),
    ("driver_id", 1, "B"),
    ("team_id", 1, "B"),
    ("car_position", 1, "B"),
    ("current_lap_num", 1, "B"),
    ("tyre_compound", 1, "B"),
    ("in_pits", 1, "B"),
    ("sector", 1, "B"),
    ("current_lap_invalid", 1, "B"),
    ("penalties", 1, "B"),
)


def _struct_for(layout: Sequence[Tuple[str, int, str]]) -> struct.Struct:
    return struct.Struct("<" + "".join(f"{count}{code}" for _, count, code in layout))


FRAME_HEAD_STRUCT = _struct_for(FRAME_LAYOUT)
CAR_STRUCT = _struct_for(CAR_LAYOUT)
FRAME_SIZE = FRAME_HEAD_STRUCT.size + CAR_CAPACITY * CAR_STRUCT.size


def _group(layout: Sequence[Tuple[str, int, str]], flat: Sequence) -> Dict[str, object]:
    """Fold a flat unpacked tuple back into named scalars and tuples."""
    out: Dict[str, object] = {}
    pos = 0
    for name, count, _ in layout:
        if count == 1:
            out[name] = flat[pos]
        else:
            out[name] = tuple(flat[pos:pos + count])
        pos += count
    return out


def flatten(layout: Sequence[Tuple[str, int, str]], values: Dict[str, object]) -> List[object]:
    """Inverse of the grouping step: named values -> flat list in layout order."""
    flat: List[object] = []
    for name, count, _ in layout:
        value = values[name]
        if count == 1:
            flat.append(value)
        else:
            flat.extend(value)
    return flat


def decode_car(blob: bytes, offset: int = 0) -> CarSnapshot:
    """Decode one car record starting at ``offset``."""
    fields = _group(CAR_LAYOUT, CAR_STRUCT.unpack_from(blob, offset))
    return CarSnapshot(**fields)


def decode_frame(buffer: bytes, *, strict: bool = True) -> TelemetryFrame:
    """
    Decode ``buffer`` into a TelemetryFrame.

    Raises DecodeError when the buffer is shorter than FRAME_SIZE, or (with
    ``strict``) when it is longer. Enum-like byte fields are passed through
    as-is.
    """
    size = len(buffer)
    if size < FRAME_SIZE or (strict and size != FRAME_SIZE):
        raise DecodeError(f"expected {FRAME_SIZE} bytes, got {size}")

    blob = bytes(buffer[:FRAME_SIZE])
    fields = _group(FRAME_LAYOUT, FRAME_HEAD_STRUCT.unpack_from(blob, 0))

    base = FRAME_HEAD_STRUCT.size
    cars = tuple(
        decode_car(blob, base + i * CAR_STRUCT.size) for i in range(CAR_CAPACITY)
    )
    num_cars = fields.pop("num_cars")

    return TelemetryFrame(cars=CarTable(slots=cars, num_cars=num_cars), **fields)


def encode_frame(frame: TelemetryFrame) -> bytes:
    """Pack ``frame`` back into the wire layout."""
    values = {name: getattr(frame, name) for name, _, _ in FRAME_LAYOUT if name != "num_cars"}
    values["num_cars"] = frame.cars.num_cars
    parts = [FRAME_HEAD_STRUCT.pack(*flatten(FRAME_LAYOUT, values))]
    for car in frame.cars.slots[:CAR_CAPACITY]:
        car_values = {name: getattr(car, name) for name, _, _ in CAR_LAYOUT}
        parts.append(CAR_STRUCT.pack(*flatten(CAR_LAYOUT, car_values)))
    return b"".join(parts)
