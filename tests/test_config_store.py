import pytest

from f1timing.core import config as config_facade
from f1timing.core import config_store as store_mod
from f1timing.core.config_backend import ConfigBackend
from f1timing.core.config_store import ConfigModel, ConfigStore


def _create_store(tmp_path, text="[network]\nport = 20777\n") -> ConfigStore:
    ini_path = tmp_path / "settings.ini"
    ini_path.write_text(text, encoding="utf-8")
    backend = ConfigBackend(str(ini_path))
    return ConfigStore(backend=backend)


def test_config_facade_returns_shared_instance(tmp_path, monkeypatch):
    store = _create_store(tmp_path)
    monkeypatch.setattr(store_mod, "_CONFIG_STORE", store)

    first = config_facade.Config()
    second = config_facade.Config.current()

    assert first is second is store.config


def test_defaults_when_sections_missing(tmp_path):
    store = _create_store(tmp_path, text="")
    assert store.config == ConfigModel()
    assert store.config.port == 20777
    assert store.config.strict_packet_size is True
    assert store.config.speed_unit == "kph"


def test_sections_map_to_model_fields(tmp_path):
    store = _create_store(
        tmp_path,
        text=(
            "[network]\nhost = 127.0.0.1\nport = 20800\npoll_ms = 10\nstrict_packet_size = no\n"
            "[display]\nspeed_unit = MPH\nfont_size = 11\n"
            "[colors]\nfastest = #ff00ff\n"
            "[export]\nenabled = yes\noutput_dir = out\nevery_n = 3\n"
            "[logging]\nlevel = debug\nmax_lines = 50\n"
        ),
    )
    cfg = store.config

    assert cfg.host == "127.0.0.1"
    assert cfg.port == 20800
    assert cfg.poll_ms == 10
    assert cfg.strict_packet_size is False
    assert cfg.speed_unit == "mph"
    assert cfg.font_size == 11
    assert cfg.fastest == "#ff00ff"
    assert cfg.export_enabled is True
    assert cfg.export_dir == "out"
    assert cfg.export_every_n == 3
    assert cfg.log_level == "DEBUG"
    assert cfg.log_max_lines == 50


def test_invalid_port_rejected(tmp_path):
    with pytest.raises(ValueError):
        _create_store(tmp_path, text="[network]\nport = 70000\n")


def test_invalid_speed_unit_rejected(tmp_path):
    with pytest.raises(ValueError):
        _create_store(tmp_path, text="[display]\nspeed_unit = knots\n")


def test_store_emits_signals_on_save(tmp_path, monkeypatch):
    store = _create_store(tmp_path)
    monkeypatch.setattr(store_mod, "_CONFIG_STORE", store)

    config_events = []
    display_events = []

    store.config_changed.connect(lambda cfg: config_events.append(cfg))
    store.display_setting_changed.connect(lambda section: display_events.append(section))

    store.save({"display": {"speed_unit": "mph"}, "network": {"poll_ms": 30}})

    assert len(config_events) == 1
    assert display_events == ["display"]
    assert store.config.speed_unit == "mph"
    assert store.config.poll_ms == 30


def test_facade_save_persists_to_disk(tmp_path, monkeypatch):
    store = _create_store(tmp_path)
    monkeypatch.setattr(store_mod, "_CONFIG_STORE", store)

    config_facade.Config.save({"colors": {"current_lap": "#00ff00"}})

    assert "current_lap = #00ff00" in store.backend.path.read_text(encoding="utf-8")
    assert config_facade.Config().current_lap == "#00ff00"
