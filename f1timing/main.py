"""
main.py

Entry point: binds the telemetry socket, starts the updater thread and
wires it to the overlay and the CSV exporters.
"""
import argparse
import logging
import os
import signal
import sys
from collections import deque
from typing import List, Optional

from PyQt5 import QtCore, QtWidgets

from f1_core.reader import FrameReader
from f1_core.udp_source import TransportError, UdpTelemetrySource
from f1timing.core.config import Config
from f1timing.core.config_backend import ConfigBackend
from f1timing.core.config_store import ConfigModel, ConfigStore, set_config_store
from f1timing.core.telemetry import FrameExporter, LapLogger
from f1timing.core.version import __version__
from f1timing.updater.updater import TelemetryUpdater

log = logging.getLogger(__name__)

base_dir = os.path.dirname(sys.argv[0])


class CappedFileHandler(logging.FileHandler):
    """A FileHandler that keeps only the last N lines of logs."""
    def __init__(self, filename, max_lines=200, mode="a", encoding="utf-8"):
        super().__init__(filename, mode=mode, encoding=encoding)
        self.max_lines = max_lines
        self._buffer = deque(maxlen=max_lines)

    def emit(self, record):
        msg = self.format(record)
        self._buffer.append(msg + "\n")
        # Flush buffer to file every 10 lines or on error
        if len(self._buffer) % 10 == 0 or record.levelno >= logging.ERROR:
            with open(self.baseFilename, "w", encoding=self.encoding) as f:
                f.writelines(self._buffer)


def configure_logging(cfg: ConfigModel) -> None:
    log_path = cfg.log_file
    if not os.path.isabs(log_path):
        log_path = os.path.join(base_dir, log_path)

    log_handler = CappedFileHandler(log_path, max_lines=cfg.log_max_lines)
    stream_handler = logging.StreamHandler(sys.stdout)

    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[log_handler, stream_handler],
        force=True,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="F1 UDP telemetry timing overlay")
    parser.add_argument("--settings", help="path to settings.ini (default: next to the program)")
    parser.add_argument("--port", type=int, help="UDP port to listen on (overrides settings.ini)")
    parser.add_argument("--headless", action="store_true", help="record only, no overlay window")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)

    store = ConfigStore(backend=ConfigBackend(args.settings))
    set_config_store(store)
    cfg = store.config
    configure_logging(cfg)
    log.info(f"Starting F1 Timing {__version__}")

    port = args.port if args.port is not None else cfg.port
    source = UdpTelemetrySource(cfg.host, port, cfg.buffer_size)
    try:
        source.open()
    except TransportError as e:
        log.critical(str(e))
        sys.exit(1)

    if args.headless:
        app = QtCore.QCoreApplication(sys.argv[:1])
    else:
        app = QtWidgets.QApplication(sys.argv[:1])
        app.setQuitOnLastWindowClosed(True)

    reader = FrameReader(source, strict=cfg.strict_packet_size)
    updater = TelemetryUpdater(reader, poll_ms=cfg.poll_ms)

    # Thread for updater
    thread = QtCore.QThread()
    updater.moveToThread(thread)

    sinks = []
    if cfg.export_enabled:
        sinks.append(FrameExporter(
            os.path.join(base_dir, cfg.export_dir),
            every_n=cfg.export_every_n,
            flush_every=cfg.export_flush_every,
        ))
    if cfg.lap_log:
        sinks.append(LapLogger(
            os.path.join(base_dir, cfg.export_dir, "player_laps"),
            flush_every=cfg.export_flush_every,
        ))
    for sink in sinks:
        updater.frame_updated.connect(sink.on_frame_updated)

    overlay = None
    if not args.headless:
        from f1timing.overlays.dashboard_overlay import DashboardOverlay

        overlay = DashboardOverlay(cfg)
        updater.frame_updated.connect(overlay.on_frame_updated)
        updater.error.connect(overlay.on_error)
        Config.subscribe_display(overlay.on_display_setting_changed)
        overlay.quit_requested.connect(app.quit)
        overlay.widget().show()
    else:
        updater.error.connect(lambda msg: log.error(f"Updater error: {msg}"))
        signal.signal(signal.SIGINT, lambda *_: app.quit())
        # Python signal handlers only run between bytecodes; wake the main loop now and then.
        wake = QtCore.QTimer()
        wake.timeout.connect(lambda: None)
        wake.start(250)

    shutdown_done = False

    def cleanup():
        nonlocal shutdown_done
        if shutdown_done:
            return
        shutdown_done = True
        if thread.isRunning():
            QtCore.QMetaObject.invokeMethod(
                updater, "stop", QtCore.Qt.BlockingQueuedConnection
            )
            thread.quit()
            if not thread.wait(2000):
                log.warning("Worker thread did not stop cleanly")
                thread.terminate()
                thread.wait(1000)
        for sink in sinks:
            sink.close()
        source.close()
        log.info(f"Shutdown complete ({reader.frames_decoded} frames, {reader.frames_dropped} dropped)")

    app.aboutToQuit.connect(cleanup)

    thread.start()
    QtCore.QMetaObject.invokeMethod(updater, "start", QtCore.Qt.QueuedConnection)

    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
