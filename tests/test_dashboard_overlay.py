import os
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt5 import QtWidgets

from f1_core.model import CarSnapshot, CarTable, TelemetryFrame
from f1timing.analysis.units import SpeedUnit
from f1timing.core import config_store as store_mod
from f1timing.core.config import Config
from f1timing.core.config_backend import ConfigBackend
from f1timing.core.config_store import ConfigStore
from f1timing.overlays.dashboard_overlay import DashboardOverlay


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app


@pytest.fixture
def store(tmp_path, monkeypatch):
    ini_path = tmp_path / "settings.ini"
    ini_path.write_text("[display]\nspeed_unit = kph\n", encoding="utf-8")
    store = ConfigStore(backend=ConfigBackend(str(ini_path)))
    monkeypatch.setattr(store_mod, "_CONFIG_STORE", store)
    return store


def _frame():
    car = CarSnapshot(driver_id=9, car_position=1, current_lap_num=1)
    return TelemetryFrame(speed=40.0, cars=CarTable.of([car]))


def test_overlay_follows_saved_display_settings(qapp, store):
    overlay = DashboardOverlay()
    Config.subscribe_display(overlay.on_display_setting_changed)
    overlay.on_frame_updated(_frame(), ())
    assert overlay.widget().header.text().startswith("144 km/h")

    store.save({"display": {"speed_unit": "mph"}})

    assert overlay._presenter.speed_unit is SpeedUnit.MPH
    assert overlay.widget().header.text().startswith("89 mph")


def test_overlay_restyles_on_color_change(qapp, store):
    overlay = DashboardOverlay()
    Config.subscribe_display(overlay.on_display_setting_changed)

    store.save({"colors": {"header_bg": "#445566", "text_color": "yellow"}})

    window = overlay.widget()
    assert window._cfg.header_bg == "#445566"
    assert "color: yellow" in window.header.styleSheet()
    assert all("#445566" in t.styleSheet() for t in window.tables)
