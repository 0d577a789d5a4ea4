"""
model.py

Immutable data models for one decoded telemetry packet: the per-car snapshot,
the bounded car table and the frame itself.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

CAR_CAPACITY = 20

# Wheel arrays are always ordered rear-left, rear-right, front-left, front-right.
WHEEL_ORDER = ("rl", "rr", "fl", "fr")

Vec3 = Tuple[float, float, float]
WheelFloats = Tuple[float, float, float, float]
WheelBytes = Tuple[int, int, int, int]

_ZERO_WHEELS = (0.0, 0.0, 0.0, 0.0)
_ZERO_WHEEL_BYTES = (0, 0, 0, 0)


@dataclass(frozen=True)
class CarSnapshot:
    """
    Per-car state at the frame's instant.
    - current_lap_num: 1-indexed lap the car is on
    - sector: 0, 1 or 2 meaning sector 1/2/3 (passed through uninterpreted)
    - current_lap_time: elapsed time of the current lap (s)
    - last_lap_time: total time of the last completed lap (s)
    - sector1_time / sector2_time: sector splits of the current lap (s)
    - car_position: race position, 1-indexed, 0 means not yet classified
    - in_pits: 0 = none, 1 = pitting, 2 = in pit area
    """
    world_position: Vec3 = (0.0, 0.0, 0.0)
    last_lap_time: float = 0.0
    current_lap_time: float = 0.0
    best_lap_time: float = 0.0
    sector1_time: float = 0.0
    sector2_time: float = 0.0
    lap_distance: float = 0.0
    driver_id: int = 0
    team_id: int = 0
    car_position: int = 0
    current_lap_num: int = 0
    tyre_compound: int = 0
    in_pits: int = 0
    sector: int = 0
    current_lap_invalid: int = 0
    penalties: int = 0


@dataclass(frozen=True)
class CarTable:
    """
    Fixed-capacity car buffer plus the logical car count from the packet.

    Only the first ``min(num_cars, CAR_CAPACITY)`` slots hold cars; ``len()``,
    iteration and ``get()`` never look past them. ``slots`` is the raw buffer.
    """
    slots: Tuple[CarSnapshot, ...] = field(
        default_factory=lambda: tuple(CarSnapshot() for _ in range(CAR_CAPACITY))
    )
    num_cars: int = 0

    @classmethod
    def of(cls, cars, num_cars: Optional[int] = None) -> "CarTable":
        """Build a table from the leading cars, padding the buffer with empty slots."""
        cars = tuple(cars)[:CAR_CAPACITY]
        padding = tuple(CarSnapshot() for _ in range(CAR_CAPACITY - len(cars)))
        count = len(cars) if num_cars is None else num_cars
        return cls(slots=cars + padding, num_cars=count)

    @property
    def valid_count(self) -> int:
        return max(0, min(self.num_cars, len(self.slots)))

    def __len__(self) -> int:
        return self.valid_count

    def __iter__(self) -> Iterator[CarSnapshot]:
        return iter(self.slots[:self.valid_count])

    def get(self, index: int) -> Optional[CarSnapshot]:
        if 0 <= index < self.valid_count:
            return self.slots[index]
        return None


@dataclass(frozen=True)
class TelemetryFrame:
    """One decoded telemetry packet. A new instance is produced per datagram."""
    # world state
    time: float = 0.0
    lap_time: float = 0.0
    lap_distance: float = 0.0
    total_distance: float = 0.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    speed: float = 0.0          # m/s
    xv: float = 0.0
    yv: float = 0.0
    zv: float = 0.0
    xr: float = 0.0
    yr: float = 0.0
    zr: float = 0.0
    xd: float = 0.0
    yd: float = 0.0
    zd: float = 0.0
    susp_pos: WheelFloats = _ZERO_WHEELS
    susp_vel: WheelFloats = _ZERO_WHEELS
    wheel_speed: WheelFloats = _ZERO_WHEELS

    # driving / session
    throttle: float = 0.0       # 0-1
    steer: float = 0.0
    brake: float = 0.0          # 0-1
    clutch: float = 0.0
    gear: float = 0.0
    gforce_lat: float = 0.0
    gforce_lon: float = 0.0
    lap: float = 0.0
    engine_rate: float = 0.0
    sli_pro_native_support: float = 0.0
    car_position: float = 0.0
    kers_level: float = 0.0
    kers_max_level: float = 0.0
    drs: float = 0.0
    traction_control: float = 0.0
    anti_lock_brakes: float = 0.0
    fuel_in_tank: float = 0.0
    fuel_capacity: float = 0.0
    in_pits: float = 0.0
    sector: float = 0.0
    sector1_time: float = 0.0
    sector2_time: float = 0.0
    brakes_temp: WheelFloats = _ZERO_WHEELS
    tyres_pressure: WheelFloats = _ZERO_WHEELS

    # session / setup
    team_info: float = 0.0
    total_laps: float = 0.0
    track_size: float = 0.0     # metres
    last_lap_time: float = 0.0
    max_rpm: float = 0.0
    idle_rpm: float = 0.0
    max_gears: float = 0.0
    session_type: float = 0.0   # 0 unknown, 1 practice, 2 qualifying, 3 race
    drs_allowed: float = 0.0
    track_number: float = 0.0
    vehicle_fia_flags: float = 0.0
    era: float = 0.0
    engine_temperature: float = 0.0
    gforce_vert: float = 0.0
    ang_vel_x: float = 0.0
    ang_vel_y: float = 0.0
    ang_vel_z: float = 0.0

    # byte-sized percentages and enums
    tyres_temperature: WheelBytes = _ZERO_WHEEL_BYTES
    tyres_wear: WheelBytes = _ZERO_WHEEL_BYTES
    tyre_compound: int = 0
    front_brake_bias: int = 0
    fuel_mix: int = 0
    current_lap_invalid: int = 0
    tyres_damage: WheelBytes = _ZERO_WHEEL_BYTES
    front_left_wing_damage: int = 0
    front_right_wing_damage: int = 0
    rear_wing_damage: int = 0
    engine_damage: int = 0
    gear_box_damage: int = 0
    exhaust_damage: int = 0
    pit_limiter_status: int = 0
    pit_speed_limit: int = 0
    session_time_left: float = 0.0
    rev_lights_percent: int = 0
    is_spectating: int = 0
    spectator_car_index: int = 0

    # car data
    player_car_index: int = 0
    cars: CarTable = field(default_factory=CarTable)

    @property
    def num_cars(self) -> int:
        return self.cars.num_cars

    def player_car(self) -> Optional[CarSnapshot]:
        """Return the tracked car's snapshot, or None if the index is out of range."""
        return self.cars.get(self.player_car_index)
