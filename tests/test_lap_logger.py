import csv
import os

from f1_core.model import CarSnapshot, CarTable, TelemetryFrame
from f1timing.core.lap_history import LapAggregator, is_finalized
from f1timing.core.telemetry import LapLogger


def _rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def _frame(lap, sector, elapsed, last=0.0, s1=0.0, s2=0.0):
    car = CarSnapshot(
        current_lap_num=lap,
        sector=sector,
        current_lap_time=elapsed,
        last_lap_time=last,
        sector1_time=s1,
        sector2_time=s2,
    )
    return TelemetryFrame(cars=CarTable.of([car]))


def test_writes_each_finished_lap_once(tmp_path):
    logger = LapLogger(base_name=str(tmp_path / "laps" / "player_laps"))

    logger.on_frame_updated(None, ((10.0, 0.0, 0.0, 10.0),))
    assert logger.laps_written == 0

    history = ((28.0, 30.0, 32.0, 90.0), (0.5, 0.0, 0.0, 0.5))
    logger.on_frame_updated(None, history)
    logger.on_frame_updated(None, history)
    assert logger.laps_written == 1

    logger.on_frame_updated(None, (history[0], (27.0, 29.0, 31.0, 87.0), (0.25, 0.0, 0.0, 0.25)))
    logger.close()

    rows = _rows(logger.file_path)
    assert rows[0] == ["lap", "sector1_s", "sector2_s", "sector3_s", "lap_s"]
    assert rows[1] == ["1", "28.0", "30.0", "32.0", "90.0"]
    assert rows[2] == ["2", "27.0", "29.0", "31.0", "87.0"]
    assert len(rows) == 3


def test_tracking_from_mid_session_skips_unseen_laps(tmp_path):
    agg = LapAggregator()
    logger = LapLogger(base_name=str(tmp_path / "player_laps"))

    for frame in (
        _frame(5, 1, 40.0, last=90.0, s1=28.0),
        _frame(6, 0, 0.5, last=91.0, s1=28.0, s2=30.0),
    ):
        agg.ingest(frame)
        logger.on_frame_updated(frame, agg.snapshot())
    logger.close()

    rows = _rows(logger.file_path)
    assert rows[1:] == [["5", "28.0", "30.0", "33.0", "91.0"]]
    assert logger.laps_written == 1


def test_lap_without_line_crossing_is_not_logged(tmp_path):
    logger = LapLogger(base_name=str(tmp_path / "player_laps"))

    # Lap 1 abandoned in sector 3, lap 2 first seen in sector 2
    logger.on_frame_updated(None, ((28.0, 30.0, 20.0, 90.0), (28.0, 5.0, 0.0, 33.0)))
    logger.close()

    assert len(_rows(logger.file_path)) == 1
    assert logger.laps_written == 0


def test_is_finalized():
    assert is_finalized((28.0, 30.0, 32.0, 90.0))
    assert not is_finalized((0.0, 0.0, 0.0, 0.0))
    assert not is_finalized((0.0, 0.0, 0.0, 90.0))
    assert not is_finalized((28.0, 30.0, 20.0, 90.0))
    assert not is_finalized((float("nan"), 30.0, 32.0, 90.0))


def test_filename_is_timestamped(tmp_path):
    with LapLogger(base_name=str(tmp_path / "player_laps")) as logger:
        name = logger.get_filename()

    assert name.startswith("player_laps_")
    assert name.endswith(".csv")
    assert os.path.exists(logger.file_path)


def test_values_rounded_to_four_places(tmp_path):
    logger = LapLogger(base_name=str(tmp_path / "player_laps"))
    logger.on_frame_updated(None, ((28.123456, 30.0, 31.876544, 90.0), (0.0, 0.0, 0.0, 0.0)))
    logger.close()

    assert _rows(logger.file_path)[1][1] == "28.1235"
