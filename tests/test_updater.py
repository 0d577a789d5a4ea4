from f1_core.model import CarSnapshot, CarTable, TelemetryFrame
from f1timing.updater.updater import MIN_POLL_MS, TelemetryUpdater


class StubReader:
    def __init__(self, batches=None, error=None):
        self._batches = list(batches or [])
        self._error = error

    def read_frames(self):
        if self._error is not None:
            raise self._error
        return self._batches.pop(0) if self._batches else []


def _frame(lap, sector, elapsed, **car_fields):
    car = CarSnapshot(current_lap_num=lap, sector=sector, current_lap_time=elapsed, **car_fields)
    return TelemetryFrame(cars=CarTable.of([car]))


def test_process_frame_emits_frame_and_history_snapshot():
    updater = TelemetryUpdater(StubReader())
    received = []
    updater.frame_updated.connect(lambda frame, history: received.append((frame, history)))

    frame = _frame(1, 0, 12.0)
    updater.process_frame(frame)

    assert len(received) == 1
    emitted_frame, history = received[0]
    assert emitted_frame is frame
    assert history == ((12.0, 0.0, 0.0, 12.0),)


def test_tick_drains_reader_in_order():
    frames = [_frame(1, 0, 10.0), _frame(1, 1, 30.0, sector1_time=25.0)]
    updater = TelemetryUpdater(StubReader([frames]))
    updater._running = True
    received = []
    updater.frame_updated.connect(lambda frame, history: received.append(history))

    updater._on_tick()

    assert len(received) == 2
    assert received[-1] == ((25.0, 5.0, 0.0, 30.0),)
    assert updater.aggregator.lap_count == 1


def test_tick_errors_emitted_once_per_message():
    updater = TelemetryUpdater(StubReader(error=RuntimeError("socket gone")))
    updater._running = True
    errors = []
    updater.error.connect(errors.append)

    updater._on_tick()
    updater._on_tick()

    assert errors == ["RuntimeError: socket gone"]


def test_tick_ignored_when_not_running():
    updater = TelemetryUpdater(StubReader(error=RuntimeError("boom")))
    errors = []
    updater.error.connect(errors.append)

    updater._on_tick()

    assert errors == []


def test_poll_interval_clamped():
    updater = TelemetryUpdater(StubReader(), poll_ms=1)
    assert updater.poll_ms == MIN_POLL_MS
    updater.set_poll_interval(50)
    assert updater.poll_ms == 50
