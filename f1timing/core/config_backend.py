"""Low-level INI parsing helpers for configuration management."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import configparser
import os
import sys

from f1timing.utils.ini_preserver import update_ini_file

TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigBackend:
    """Encapsulates discovery, parsing, and persistence of settings.ini."""

    def __init__(self, ini_path: Optional[str] = None) -> None:
        base_dir = os.path.dirname(sys.argv[0])
        self._path = Path(ini_path or (Path(base_dir) / "settings.ini"))

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Dict[str, Dict[str, str]]:
        parser = configparser.ConfigParser(inline_comment_prefixes=(";",))
        parser.read(self._path, encoding="utf-8")
        data: Dict[str, Dict[str, str]] = {}
        for section in parser.sections():
            data[section] = dict(parser.items(section))
        return data

    def save(self, section_updates: Mapping[str, Mapping[str, Any]]) -> None:
        """Persist *section_updates* to disk, preserving unrelated comments."""

        if not section_updates:
            return
        normalized = {
            section: {key: _format_value(value) for key, value in values.items()}
            for section, values in section_updates.items()
        }
        update_ini_file(str(self._path), normalized)

    def get_option(
        self,
        data: Mapping[str, Mapping[str, str]],
        section: str,
        option: str,
        fallback: str = "",
    ) -> str:
        section_map = data.get(section)
        if section_map is None:
            return fallback
        return section_map.get(option, fallback)

    def get_bool(
        self,
        data: Mapping[str, Mapping[str, str]],
        section: str,
        option: str,
        fallback: bool,
    ) -> bool:
        raw = self.get_option(data, section, option, fallback="")
        if not raw:
            return fallback
        return raw.strip().lower() in TRUE_VALUES


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
