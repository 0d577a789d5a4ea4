import csv
from datetime import datetime

from f1_core.model import CarSnapshot, CarTable, TelemetryFrame
from f1timing.core.telemetry import FrameExporter, frame_points
from f1timing.core.telemetry.frame_exporter import CAR_KEYS, TELEMETRY_KEYS


def _frame(speed=50.0):
    cars = [
        CarSnapshot(driver_id=9, car_position=1, world_position=(1.0, 2.0, 3.0)),
        CarSnapshot(driver_id=22, car_position=2),
    ]
    return TelemetryFrame(
        speed=speed,
        wheel_speed=(1.0, 2.0, 3.0, 4.0),
        cars=CarTable.of(cars),
    )


def _rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_field_keys_are_kebab_case_with_wheel_and_axis_suffixes():
    telemetry = {key for _, key, _ in TELEMETRY_KEYS}
    cars = {key for _, key, _ in CAR_KEYS}

    assert "lap-time" in telemetry
    assert {"wheel-speed-rl", "wheel-speed-rr", "wheel-speed-fl", "wheel-speed-fr"} <= telemetry
    assert "num-cars" in telemetry
    assert {"world-position-x", "world-position-y", "world-position-z"} <= cars
    assert "driver-id" in cars


def test_frame_points_tag_self_and_each_valid_car():
    stamp = datetime(2024, 5, 1, 12, 0, 0)
    points = frame_points(_frame(), timestamp=stamp)

    assert [p.measurement for p in points] == ["telemetry", "car", "car"]
    assert points[0].tags == {"driver": "self"}
    assert points[0].fields["speed"] == 50.0
    assert points[0].fields["wheel-speed-fl"] == 3.0
    assert points[1].tags == {"driver": "9"}
    assert points[1].fields["world-position-y"] == 2.0
    assert points[2].tags == {"driver": "22"}
    assert all(p.time == stamp for p in points)


def test_exporter_writes_headers_and_rows(tmp_path):
    with FrameExporter(str(tmp_path / "out")) as exporter:
        exporter.on_frame_updated(_frame(), ())
        telemetry_path = exporter.telemetry_path
        cars_path = exporter.cars_path

    telemetry = _rows(telemetry_path)
    cars = _rows(cars_path)

    assert telemetry[0][:3] == ["timestamp", "driver", "time"]
    assert len(telemetry) == 2
    assert telemetry[1][1] == "self"

    assert cars[0][:3] == ["timestamp", "driver", "car_index"]
    assert [row[1:3] for row in cars[1:]] == [["9", "0"], ["22", "1"]]


def test_exporter_samples_every_nth_frame(tmp_path):
    exporter = FrameExporter(str(tmp_path), every_n=3)
    for i in range(7):
        exporter.record_frame(_frame(speed=float(i)))
    exporter.close()

    speeds = [row[TELEMETRY_KEYS.index(("speed", "speed", None)) + 2] for row in _rows(exporter.telemetry_path)[1:]]
    assert speeds == ["0.0", "3.0", "6.0"]


def test_exporter_ignores_frames_after_close(tmp_path):
    exporter = FrameExporter(str(tmp_path))
    exporter.close()
    exporter.record_frame(_frame())
    exporter.close()

    assert len(_rows(exporter.telemetry_path)) == 1
