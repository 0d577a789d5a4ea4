"""Export every field of each frame as tagged time-series points, written to CSV."""
from __future__ import annotations

import logging
log = logging.getLogger(__name__)

import csv
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from f1_core.frame_decoder import CAR_LAYOUT, FRAME_LAYOUT
from f1_core.model import WHEEL_ORDER, TelemetryFrame

_AXES = ("x", "y", "z")


@dataclass(frozen=True)
class MetricPoint:
    measurement: str
    tags: Dict[str, str]
    fields: Dict[str, object]
    time: datetime


def _field_keys(layout: Sequence[Tuple[str, int, str]]) -> List[Tuple[str, str, Optional[int]]]:
    """(attribute, exported key, element index or None) in layout order."""
    keys: List[Tuple[str, str, Optional[int]]] = []
    for name, count, _ in layout:
        base = name.replace("_", "-")
        if count == 1:
            keys.append((name, base, None))
            continue
        suffixes = WHEEL_ORDER if count == 4 else _AXES
        for i, suffix in enumerate(suffixes[:count]):
            keys.append((name, f"{base}-{suffix}", i))
    return keys


TELEMETRY_KEYS = _field_keys(FRAME_LAYOUT)
CAR_KEYS = _field_keys(CAR_LAYOUT)


def _fields_of(obj, keys) -> Dict[str, object]:
    out: Dict[str, object] = {}
    for attr, key, index in keys:
        value = getattr(obj, attr)
        out[key] = value if index is None else value[index]
    return out


def frame_points(frame: TelemetryFrame, timestamp: Optional[datetime] = None) -> List[MetricPoint]:
    """
    Return one ``telemetry`` point for the frame (tagged driver=self) followed
    by one ``car`` point per valid car (tagged with its driver id).
    """
    ts = timestamp or datetime.now()
    points = [MetricPoint("telemetry", {"driver": "self"}, _fields_of(frame, TELEMETRY_KEYS), ts)]
    for car in frame.cars:
        points.append(
            MetricPoint("car", {"driver": str(car.driver_id)}, _fields_of(car, CAR_KEYS), ts)
        )
    return points


class FrameExporter:
    """Writes frame points to timestamped ``telemetry_*.csv`` and ``cars_*.csv`` files."""

    def __init__(
        self,
        output_dir: str,
        every_n: int = 1,
        flush_every: Optional[int] = None,
    ) -> None:
        self.output_dir = os.path.abspath(output_dir)
        self._every_n = max(1, int(every_n))
        self._flush_every = flush_every if flush_every and flush_every > 0 else None
        self._frames_seen = 0
        self._rows_since_flush = 0
        os.makedirs(self.output_dir, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.telemetry_path = os.path.join(self.output_dir, f"telemetry_{timestamp}.csv")
        self.cars_path = os.path.join(self.output_dir, f"cars_{timestamp}.csv")

        self._telemetry_file = open(self.telemetry_path, "w", newline="", encoding="utf-8")
        self._cars_file = open(self.cars_path, "w", newline="", encoding="utf-8")
        self._telemetry_writer = csv.writer(self._telemetry_file)
        self._cars_writer = csv.writer(self._cars_file)
        self._telemetry_writer.writerow(["timestamp", "driver"] + [k for _, k, _ in TELEMETRY_KEYS])
        self._cars_writer.writerow(["timestamp", "driver", "car_index"] + [k for _, k, _ in CAR_KEYS])
        self.flush()

        log.info(f"[FrameExporter] Exporting to {self.output_dir}")

    @property
    def every_n(self) -> int:
        return self._every_n

    def on_frame_updated(self, frame: TelemetryFrame, _history=None) -> None:
        self.record_frame(frame)

    def record_frame(self, frame: TelemetryFrame, timestamp: Optional[datetime] = None) -> None:
        if self._telemetry_writer is None:
            return

        self._frames_seen += 1
        if (self._frames_seen - 1) % self._every_n != 0:
            return

        car_index = 0
        for point in frame_points(frame, timestamp):
            stamp = point.time.isoformat(timespec="milliseconds")
            if point.measurement == "telemetry":
                self._telemetry_writer.writerow(
                    [stamp, point.tags["driver"]] + [point.fields[k] for _, k, _ in TELEMETRY_KEYS]
                )
            else:
                self._cars_writer.writerow(
                    [stamp, point.tags["driver"], car_index] + [point.fields[k] for _, k, _ in CAR_KEYS]
                )
                car_index += 1
        self._after_write()

    def flush(self) -> None:
        for f in (self._telemetry_file, self._cars_file):
            if f is not None:
                f.flush()
        self._rows_since_flush = 0

    def close(self) -> None:
        try:
            self.flush()
            for f in (self._telemetry_file, self._cars_file):
                if f is not None:
                    f.close()
        finally:
            self._telemetry_file = None
            self._cars_file = None
            self._telemetry_writer = None
            self._cars_writer = None

    def _after_write(self) -> None:
        if self._flush_every is None:
            return
        self._rows_since_flush += 1
        if self._rows_since_flush >= self._flush_every:
            self.flush()

    def __enter__(self) -> "FrameExporter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
