"""QObject-based singleton store for configuration management."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from PyQt5 import QtCore

from f1timing.analysis.units import SpeedUnit
from f1timing.core.config_backend import ConfigBackend


@dataclass
class ConfigModel:
    # [network]
    host: str = "0.0.0.0"
    port: int = 20777
    buffer_size: int = 2048
    poll_ms: int = 20
    strict_packet_size: bool = True

    # [display]
    speed_unit: str = SpeedUnit.KPH.value
    font_family: str = "Consolas"
    font_size: int = 9
    fudge_px: int = 2

    # [colors]
    background_rgba: str = "0,0,0,180"
    text_color: str = "white"
    header_bg: str = "#222"
    header_fg: str = "white"
    grid_color: str = "#333"
    fastest: str = "#f0f"
    current_lap: str = "#0f0"
    pitting: str = "#ffcc00"
    in_pits: str = "#ff8800"

    # [export]
    export_enabled: bool = False
    export_dir: str = "telemetry"
    export_every_n: int = 1
    export_flush_every: int = 60
    lap_log: bool = True

    # [logging]
    log_file: str = "timing_log.txt"
    log_max_lines: int = 200
    log_level: str = "INFO"


class ConfigStore(QtCore.QObject):
    config_changed = QtCore.pyqtSignal(object)
    display_setting_changed = QtCore.pyqtSignal(str)

    DISPLAY_SECTIONS = {"display", "colors"}

    def __init__(self, backend: Optional[ConfigBackend] = None) -> None:
        super().__init__()
        self._backend = backend or ConfigBackend()
        self._config = ConfigModel()
        self.reload()

    @property
    def config(self) -> ConfigModel:
        return self._config

    @property
    def backend(self) -> ConfigBackend:
        return self._backend

    def reload(self) -> ConfigModel:
        data = self._backend.load()
        cfg = ConfigModel()

        self._apply_network_settings(cfg, data)
        self._apply_display_settings(cfg, data)
        self._apply_export_settings(cfg, data)

        if not (1 <= cfg.port <= 65535):
            raise ValueError(f"Invalid UDP port {cfg.port}; expected 1-65535")
        cfg.speed_unit = SpeedUnit.parse(cfg.speed_unit).value

        self._config = cfg
        self.config_changed.emit(cfg)
        return cfg

    def save(self, section_updates: Mapping[str, Mapping[str, object]]) -> ConfigModel:
        self._backend.save(section_updates)
        cfg = self.reload()
        for section in section_updates:
            if section.lower() in self.DISPLAY_SECTIONS:
                self.display_setting_changed.emit(section.lower())
        return cfg

    def _apply_network_settings(self, cfg: ConfigModel, data: Mapping[str, Mapping[str, str]]) -> None:
        network = data.get("network", {})

        cfg.host = network.get("host", cfg.host)
        cfg.port = int(network.get("port", cfg.port))
        cfg.buffer_size = int(network.get("buffer_size", cfg.buffer_size))
        cfg.poll_ms = int(network.get("poll_ms", cfg.poll_ms))
        cfg.strict_packet_size = self._backend.get_bool(
            data, "network", "strict_packet_size", cfg.strict_packet_size
        )

    def _apply_display_settings(self, cfg: ConfigModel, data: Mapping[str, Mapping[str, str]]) -> None:
        display = data.get("display", {})
        colors = data.get("colors", {})

        cfg.speed_unit = display.get("speed_unit", cfg.speed_unit)
        cfg.font_family = display.get("font_family", cfg.font_family)
        cfg.font_size = int(display.get("font_size", cfg.font_size))
        cfg.fudge_px = int(display.get("fudge_px", cfg.fudge_px))

        cfg.background_rgba = colors.get("background_rgba", cfg.background_rgba)
        cfg.text_color = colors.get("text_color", cfg.text_color)
        cfg.header_bg = colors.get("header_bg", cfg.header_bg)
        cfg.header_fg = colors.get("header_fg", cfg.header_fg)
        cfg.grid_color = colors.get("grid_color", cfg.grid_color)
        cfg.fastest = colors.get("fastest", cfg.fastest)
        cfg.current_lap = colors.get("current_lap", cfg.current_lap)
        cfg.pitting = colors.get("pitting", cfg.pitting)
        cfg.in_pits = colors.get("in_pits", cfg.in_pits)

    def _apply_export_settings(self, cfg: ConfigModel, data: Mapping[str, Mapping[str, str]]) -> None:
        export = data.get("export", {})
        logging_section = data.get("logging", {})

        cfg.export_enabled = self._backend.get_bool(data, "export", "enabled", cfg.export_enabled)
        cfg.export_dir = export.get("output_dir", cfg.export_dir)
        cfg.export_every_n = int(export.get("every_n", cfg.export_every_n))
        cfg.export_flush_every = int(export.get("flush_every", cfg.export_flush_every))
        cfg.lap_log = self._backend.get_bool(data, "export", "lap_log", cfg.lap_log)

        cfg.log_file = logging_section.get("log_file", cfg.log_file)
        cfg.log_max_lines = int(logging_section.get("max_lines", cfg.log_max_lines))
        cfg.log_level = logging_section.get("level", cfg.log_level).upper()


_CONFIG_STORE: Optional[ConfigStore] = None


def get_config_store() -> ConfigStore:
    global _CONFIG_STORE
    if _CONFIG_STORE is None:
        _CONFIG_STORE = ConfigStore()
    return _CONFIG_STORE


def set_config_store(store: ConfigStore) -> None:
    """Install *store* as the shared instance (used when --settings is given)."""
    global _CONFIG_STORE
    _CONFIG_STORE = store


__all__ = [
    "ConfigModel",
    "ConfigStore",
    "get_config_store",
    "set_config_store",
]
