"""
updater.py

TelemetryUpdater runs in a worker QThread, drains the UDP socket on a timer,
folds each decoded frame into the lap history and emits the result.
It emits `frame_updated` (TelemetryFrame, PlayerLapHistory) and `error` (str).
"""
import logging
log = logging.getLogger(__name__)

from typing import Optional

from PyQt5 import QtCore

from f1_core.model import TelemetryFrame
from f1_core.reader import FrameReader
from f1timing.core.lap_history import LapAggregator

MIN_POLL_MS = 5


class TelemetryUpdater(QtCore.QObject):
    """
    TelemetryUpdater polls a FrameReader and emits one signal per frame.

    Usage:
      - create FrameReader and TelemetryUpdater(reader, poll_ms)
      - create QThread, move updater to thread, start thread, invoke start()
      - connect signals: frame_updated (frame, history snapshot), error (str)
      - call stop() (via QMetaObject.invokeMethod) before quitting thread
    """
    frame_updated = QtCore.pyqtSignal(object, object)  # TelemetryFrame, PlayerLapHistory
    error = QtCore.pyqtSignal(str)

    def __init__(
        self,
        reader: FrameReader,
        poll_ms: int = 20,
        aggregator: Optional[LapAggregator] = None,
    ):
        super().__init__()
        self._reader = reader
        self._aggregator = aggregator or LapAggregator()
        self._poll_ms = max(MIN_POLL_MS, int(poll_ms))
        self._timer: Optional[QtCore.QTimer] = None
        self._running = False
        self._last_error_msg: Optional[str] = None

    @property
    def aggregator(self) -> LapAggregator:
        return self._aggregator

    @property
    def poll_ms(self) -> int:
        return self._poll_ms

    @QtCore.pyqtSlot()
    def start(self):
        """Called in the worker thread; starts a QTimer in that thread's event loop."""
        if self._running:
            return
        self._running = True
        self._last_error_msg = None
        self._timer = QtCore.QTimer()
        self._timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._timer.setInterval(self._poll_ms)
        self._timer.timeout.connect(self._on_tick)
        self._timer.start()
        log.info(f"Telemetry updater started (poll {self._poll_ms} ms)")

    @QtCore.pyqtSlot()
    def stop(self):
        """Stop polling; the thread owner quits the thread afterwards."""
        self._running = False
        if self._timer is not None:
            self._timer.stop()
            self._timer.deleteLater()
            self._timer = None
            log.info("Telemetry updater stopped")

    @QtCore.pyqtSlot(int)
    def set_poll_interval(self, ms: int):
        """Adjust polling rate dynamically."""
        self._poll_ms = max(MIN_POLL_MS, int(ms))
        if self._timer is not None:
            self._timer.setInterval(self._poll_ms)

    def process_frame(self, frame: TelemetryFrame) -> None:
        """Aggregate one frame and publish it with a snapshot of the history."""
        self._aggregator.ingest(frame)
        self.frame_updated.emit(frame, self._aggregator.snapshot())

    def _on_tick(self):
        """Tick handler invoked in worker thread; drain the socket and emit results."""
        if not self._running:
            return

        try:
            for frame in self._reader.read_frames():
                self.process_frame(frame)
            self._last_error_msg = None
        except Exception as e:
            # Unexpected errors: report once, keep polling
            log.exception("Telemetry tick failed")
            self._emit_error_once(f"{type(e).__name__}: {e}")

    def _emit_error_once(self, msg: str) -> None:
        if not msg or self._last_error_msg == msg:
            return
        self._last_error_msg = msg
        self.error.emit(msg)
