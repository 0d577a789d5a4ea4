"""Turn a frame plus the lap history into plain display rows for the overlay.

Kept free of widgets so the formatting can be tested without a display.
Nothing here feeds back into lap aggregation.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, List, NamedTuple, Optional, Sequence

from f1_core.model import CarSnapshot, TelemetryFrame
from f1timing.analysis.lap_times import Cell, format_lap_time, lap_table_rows
from f1timing.analysis.name_utils import driver_code, team_name, tyre_name
from f1timing.analysis.ranking import rank_cars
from f1timing.analysis.units import SpeedUnit, SpeedUnitSetting, format_distance, format_speed
from f1timing.core.lap_history import LapRecord

log = logging.getLogger(__name__)

RACE_SESSION = 3
LAP_HEADERS = ["#", "Sector 1", "Sector 2", "Sector 3", "Lap Time"]
STANDINGS_HEADERS = ["Pos", "Driver", "Team", "Lap", "Tyre", "Time", "Current", "Progress"]

SaveCallback = Callable[[SpeedUnit], None]


def _percent(fraction: float) -> int:
    """0-1 pedal value as a whole percentage; 0 for values that are not finite."""
    if not math.isfinite(fraction):
        return 0
    return int(100 * fraction)


class StandingsRow(NamedTuple):
    position: int
    driver: str
    driver_color: Optional[str]
    team: str
    lap: int
    tyre: str
    lap_time: str
    lap_time_color: Optional[str]
    current_time: str
    progress: str
    sector: int


class DashboardView(NamedTuple):
    speed: str
    throttle_pct: int
    brake_pct: int
    track_length: str
    standings: List[StandingsRow]
    laps: List[List[Cell]]


class DashboardPresenter:
    """Builds DashboardView snapshots and owns the speed-unit preference."""

    def __init__(self, cfg, unit_setting: Optional[SpeedUnitSetting] = None,
                 save_callback: Optional[SaveCallback] = None):
        self._cfg = cfg
        self._units = unit_setting or SpeedUnitSetting(SpeedUnit.parse(cfg.speed_unit))
        self._save = save_callback

    @property
    def speed_unit(self) -> SpeedUnit:
        return self._units.unit

    def update_config(self, cfg) -> None:
        self._cfg = cfg
        self._units.set(SpeedUnit.parse(cfg.speed_unit))

    def toggle_speed_unit(self) -> SpeedUnit:
        unit = self._units.toggle()
        if self._save is not None:
            try:
                self._save(unit)
            except (OSError, ValueError) as exc:
                log.warning(f"Could not persist speed unit: {exc}")
        return unit

    def present(self, frame: TelemetryFrame, history: Sequence[LapRecord]) -> DashboardView:
        unit = self._units.unit
        return DashboardView(
            speed=format_speed(frame.speed, unit),
            throttle_pct=_percent(frame.throttle),
            brake_pct=_percent(frame.brake),
            track_length=format_distance(frame.track_size, unit),
            standings=self.standings_rows(frame),
            laps=lap_table_rows(history, self._cfg.fastest, self._cfg.current_lap),
        )

    def standings_rows(self, frame: TelemetryFrame) -> List[StandingsRow]:
        race = frame.session_type == RACE_SESSION
        return [
            self._standings_row(car, frame.track_size, race)
            for car in rank_cars(frame.cars)
        ]

    def _standings_row(self, car: CarSnapshot, track_size: float, race: bool) -> StandingsRow:
        shown = car.last_lap_time if race else car.best_lap_time
        lap_color = None
        if car.best_lap_time > 0 and car.last_lap_time == car.best_lap_time:
            lap_color = self._cfg.fastest

        driver_color = None
        if car.in_pits == 1:
            driver_color = self._cfg.pitting
        elif car.in_pits == 2:
            driver_color = self._cfg.in_pits

        progress = ""
        if track_size > 0 and math.isfinite(track_size) and math.isfinite(car.lap_distance):
            progress = f"{100 * car.lap_distance / track_size:.1f}%"

        return StandingsRow(
            position=car.car_position,
            driver=driver_code(car.driver_id),
            driver_color=driver_color,
            team=team_name(car.team_id),
            lap=car.current_lap_num,
            tyre=tyre_name(car.tyre_compound),
            lap_time=format_lap_time(shown) if shown > 0 else "",
            lap_time_color=lap_color,
            current_time=format_lap_time(car.current_lap_time),
            progress=progress,
            sector=car.sector,
        )
