"""
lap_history.py

Builds the tracked car's lap history (sector 1/2/3 and total per lap) from the
per-tick snapshots in each TelemetryFrame.

The game never says "lap complete". It reports the current lap number, which
sector the car is in, the elapsed time of the current lap, the last lap's
total and the sector 1/2 splits of the current lap. Sector 3 and the splits of
a finished lap therefore have to be derived by subtraction, and only once the
car has reached sector 3 or crossed the line.
"""
import logging
log = logging.getLogger(__name__)

import math
import threading
from typing import List, Optional, Tuple

from f1_core.model import CarSnapshot, TelemetryFrame

SECTOR1, SECTOR2, SECTOR3, TOTAL = range(4)

LapRecord = Tuple[float, float, float, float]
PlayerLapHistory = Tuple[LapRecord, ...]

# Tolerance for s1 + s2 + s3 == total on a finished lap (float32 inputs).
FINALIZED_TOLERANCE = 1e-3


def is_finalized(lap: LapRecord) -> bool:
    """
    True if ``lap`` was closed on a line crossing: all three sectors and the
    total are known and the sectors add up to the total. Laps that were never
    observed stay zero, and a lap abandoned mid-way keeps an in-progress
    sector 3 that does not add up.
    """
    s1, s2, s3, total = lap
    if not all(math.isfinite(v) and v > 0 for v in lap):
        return False
    return math.isclose(s1 + s2 + s3, total, abs_tol=FINALIZED_TOLERANCE)


class LapAggregator:
    """
    Maintains the lap history of the car at the frame's player-car index.

    Only one thread may call ingest(); snapshot() is safe from any thread and
    returns an immutable copy.
    """

    def __init__(self):
        self._laps: List[List[float]] = []
        self._lock = threading.Lock()

    @property
    def lap_count(self) -> int:
        return len(self._laps)

    def ingest(self, frame: TelemetryFrame) -> bool:
        """Fold one frame into the history. Returns False if the frame was ignored."""
        car = frame.player_car()
        if car is None:
            log.debug(
                f"Player car index {frame.player_car_index} outside "
                f"{frame.cars.valid_count} valid cars; frame ignored"
            )
            return False

        lap_num = car.current_lap_num
        if lap_num < 1:
            return False

        with self._lock:
            while len(self._laps) < lap_num:
                self._laps.append([0.0, 0.0, 0.0, 0.0])
            self._apply(car, lap_num)
        return True

    def _apply(self, car: CarSnapshot, lap_num: int) -> None:
        # Indexed by the reported lap number: after a flashback or session
        # restart the lap number drops and earlier records are written again.
        current = self._laps[lap_num - 1]
        previous = self._laps[lap_num - 2] if lap_num >= 2 else None

        if previous is not None:
            previous[TOTAL] = car.last_lap_time
        current[TOTAL] = car.current_lap_time

        if car.sector == 0:
            if previous is not None:
                # Just crossed the line: both splits still describe the finished lap.
                previous[SECTOR1] = car.sector1_time
                previous[SECTOR2] = car.sector2_time
                previous[SECTOR3] = car.last_lap_time - car.sector1_time - car.sector2_time
            current[SECTOR1] = car.current_lap_time
        elif car.sector == 1:
            current[SECTOR1] = car.sector1_time
            current[SECTOR2] = car.current_lap_time - car.sector1_time
        elif car.sector == 2:
            current[SECTOR1] = car.sector1_time
            current[SECTOR2] = car.sector2_time
            current[SECTOR3] = car.current_lap_time - car.sector1_time - car.sector2_time

    def snapshot(self) -> PlayerLapHistory:
        """Return an immutable copy of the history, one LapRecord per lap."""
        with self._lock:
            return tuple(tuple(lap) for lap in self._laps)

    def current_lap(self) -> Optional[LapRecord]:
        """Return the in-progress lap, or None before the first frame."""
        with self._lock:
            if not self._laps:
                return None
            return tuple(self._laps[-1])

    def completed_laps(self) -> PlayerLapHistory:
        """Return every lap except the one in progress."""
        return self.snapshot()[:-1]
