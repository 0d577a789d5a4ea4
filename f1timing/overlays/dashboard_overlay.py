"""
dashboard_overlay.py

Controller: renders a TelemetryFrame and the player's lap history into an
OverlayTableWindow. Header line carries speed, pedals and track length;
table 0 is the standings, table 1 the player's laps.
Keys: `s` toggles mph/kph, `q` quits.
"""

from typing import Optional, Sequence

from PyQt5 import QtCore, QtWidgets

import logging
log = logging.getLogger(__name__)

from f1_core.model import TelemetryFrame
from f1timing.analysis.units import SpeedUnit
from f1timing.core.config import Config
from f1timing.core.lap_history import LapRecord
from f1timing.overlays.base_overlay import BaseOverlay
from f1timing.overlays.overlay_table_window import OverlayTableWindow
from f1timing.ui.dashboard_presenter import (
    LAP_HEADERS,
    STANDINGS_HEADERS,
    DashboardPresenter,
    DashboardView,
)

STANDINGS_TABLE = 0
LAPS_TABLE = 1


def _save_speed_unit(unit: SpeedUnit) -> None:
    Config.save({"display": {"speed_unit": unit.value}})


class DashboardOverlay(QtCore.QObject):
    quit_requested = QtCore.pyqtSignal()

    def __init__(self, cfg=None, presenter: Optional[DashboardPresenter] = None):
        super().__init__()
        cfg = cfg or Config()
        self._presenter = presenter or DashboardPresenter(cfg, save_callback=_save_speed_unit)
        self._overlay = OverlayTableWindow(cfg, n_tables=2)
        self._overlay.key_pressed.connect(self._on_key)
        self._last_frame: Optional[TelemetryFrame] = None
        self._last_history: Sequence[LapRecord] = ()
        self._showing_error = False
        self._last_error_msg: Optional[str] = None
        self._rebuild_headers()

    # --- BaseOverlay API ---
    def widget(self):
        return self._overlay

    def on_frame_updated(self, frame: TelemetryFrame, history: Sequence[LapRecord]):
        if self._showing_error:
            self._rebuild_headers()
            self._showing_error = False
            self._last_error_msg = None

        self._last_frame = frame
        self._last_history = history
        self.render(self._presenter.present(frame, history))

    def on_error(self, msg: str):
        if self._last_error_msg != msg:
            log.error(f"[DashboardOverlay] Error occurred: {msg}")
            self._last_error_msg = msg
        self._overlay.header.setText("Error")
        for t in self._overlay.tables:
            t.setRowCount(1)
            t.setColumnCount(1)
            t.setHorizontalHeaderLabels(["Error"])
            t.setItem(0, 0, QtWidgets.QTableWidgetItem(msg))
        self._overlay.resize_to_fit()
        self._showing_error = True

    # --- Rendering ---
    def render(self, view: DashboardView):
        self._overlay.header.setText(
            f"{view.speed}  Throttle {view.throttle_pct}%  Brake {view.brake_pct}%  Track {view.track_length}"
        )
        standings = [
            [
                (str(row.position), None),
                (row.driver, row.driver_color),
                (row.team, None),
                (str(row.lap), None),
                (row.tyre, None),
                (row.lap_time, row.lap_time_color),
                (row.current_time, None),
                (row.progress, None),
            ]
            for row in view.standings
        ]
        self._overlay.fill_table(STANDINGS_TABLE, standings)
        self._overlay.fill_table(LAPS_TABLE, view.laps)
        self._overlay.resize_to_fit()

    def update_config(self, cfg):
        """Restyle the window and re-render the last frame with ``cfg``."""
        self._presenter.update_config(cfg)
        self._overlay.apply_config(cfg)
        if self._last_frame is not None:
            self.on_frame_updated(self._last_frame, self._last_history)

    def on_display_setting_changed(self, section: str):
        log.info(f"[DashboardOverlay] Display settings changed ({section})")
        self.update_config(Config())

    def _rebuild_headers(self):
        self._overlay.set_headers(STANDINGS_TABLE, STANDINGS_HEADERS)
        self._overlay.set_headers(LAPS_TABLE, LAP_HEADERS)

    def _on_key(self, key: str):
        if key == "s":
            unit = self._presenter.toggle_speed_unit()
            log.info(f"Speed unit switched to {unit.value}")
            if self._last_frame is not None:
                self.render(self._presenter.present(self._last_frame, self._last_history))
        elif key == "q":
            log.info("Quit requested from overlay")
            self.quit_requested.emit()


BaseOverlay.register(DashboardOverlay)
