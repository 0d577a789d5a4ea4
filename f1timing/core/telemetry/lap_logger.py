"""
lap_logger.py

Logs a line each time the tracked car completes a lap, with its three sector
splits and the lap total. Each session creates a timestamped CSV file
(e.g. player_laps_2025-10-08_00-53-42.csv).
"""
import logging
log = logging.getLogger(__name__)

import csv
import datetime
import os
from typing import Optional, Sequence, TextIO

from f1timing.core.lap_history import LapRecord, is_finalized


class LapLogger:
    def __init__(self, base_name: str = "player_laps", flush_every: Optional[int] = None):
        timestamp = datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.file_path = f"{base_name}_{timestamp}.csv"

        self._file: Optional[TextIO] = None
        self._writer = None
        self._laps_written = 0
        self._next_lap = 0
        self._flush_every = flush_every if flush_every and flush_every > 0 else None
        self._rows_since_flush = 0

        folder = os.path.dirname(self.file_path)
        if folder and not os.path.exists(folder):
            os.makedirs(folder)

        self._file = open(self.file_path, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        self._writer.writerow(["lap", "sector1_s", "sector2_s", "sector3_s", "lap_s"])
        self._file.flush()

        log.info(f"[LapLogger] Logging to {self.file_path}")

    @property
    def laps_written(self) -> int:
        return self._laps_written

    def get_filename(self) -> str:
        return os.path.basename(self.file_path)

    def on_frame_updated(self, _frame, history: Sequence[LapRecord]) -> None:
        """
        Write every lap that has a successor in ``history`` and was closed on a
        line crossing. Laps that were never observed (tracking started
        mid-session) or never finalized are skipped, each lap is visited once.
        """
        if not self._writer:
            return

        completed = len(history) - 1
        while self._next_lap < completed:
            lap = history[self._next_lap]
            self._next_lap += 1
            if not is_finalized(lap):
                log.debug(f"[LapLogger] Lap {self._next_lap} not finalized, skipped")
                continue
            self._laps_written += 1
            self._writer.writerow([self._next_lap] + [round(v, 4) for v in lap])
            self._after_write()

    def close(self) -> None:
        try:
            if self._file:
                self.flush()
                self._file.close()
        finally:
            self._file = None
            self._writer = None

    def flush(self) -> None:
        if not self._file:
            return
        self._file.flush()
        self._rows_since_flush = 0

    def _after_write(self) -> None:
        if self._flush_every is None:
            return
        self._rows_since_flush += 1
        if self._rows_since_flush >= self._flush_every:
            self.flush()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
