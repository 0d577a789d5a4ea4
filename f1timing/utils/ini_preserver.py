"""Targeted edits of settings.ini that keep the user's comments and layout.

``configparser.write()`` regenerates the whole file and drops every comment.
Here only the touched ``key = value`` lines change; missing keys are appended
to the end of their section and missing sections to the end of the file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

_COMMENT_MARKERS = (";", "#")
# '#' only opens full-line comments so hex colours such as #f0f stay values.
_INLINE_COMMENT_MARKERS = (";",)


def _section_name(line: str) -> Optional[str]:
    stripped = line.strip()
    if stripped.startswith("[") and stripped.endswith("]"):
        return stripped[1:-1].strip()
    return None


def _key_of(line: str) -> Optional[str]:
    stripped = line.strip()
    if not stripped or stripped.startswith(_COMMENT_MARKERS) or "=" not in stripped:
        return None
    return stripped.split("=", 1)[0].strip().lower()


def _section_bounds(lines: List[str]) -> Dict[str, Tuple[int, int]]:
    """Map section name -> (header line, end line exclusive). First occurrence wins."""
    bounds: Dict[str, Tuple[int, int]] = {}
    current: Optional[str] = None
    start = 0
    for idx, line in enumerate(lines):
        name = _section_name(line)
        if name is None:
            continue
        if current is not None and current not in bounds:
            bounds[current] = (start, idx)
        current, start = name, idx
    if current is not None and current not in bounds:
        bounds[current] = (start, len(lines))
    return bounds


def _replace_value(line: str, value: str) -> str:
    """Swap the value in ``line``, keeping indentation, spacing and trailing comment."""
    key_part, _, rest = line.partition("=")
    value_part, comment = rest, ""
    # Inline comments need leading whitespace, as configparser reads them.
    for pos, char in enumerate(rest):
        if char in _INLINE_COMMENT_MARKERS and pos > 0 and rest[pos - 1].isspace():
            value_part, comment = rest[:pos], rest[pos:]
            break
    lead = value_part[: len(value_part) - len(value_part.lstrip())]
    tail = value_part[len(value_part.rstrip()):]
    if comment and not tail:
        tail = " "
    return f"{key_part}={lead}{value}{tail}{comment}"


def _set_option(lines: List[str], section: str, key: str, value: str) -> None:
    bounds = _section_bounds(lines).get(section)
    if bounds is None:
        if lines and lines[-1].strip():
            lines.append("")
        lines.extend([f"[{section}]", f"{key} = {value}"])
        return

    start, end = bounds
    for idx in range(start + 1, end):
        if _key_of(lines[idx]) == key.lower():
            lines[idx] = _replace_value(lines[idx], value)
            return

    insert_at = end
    while insert_at > start + 1 and not lines[insert_at - 1].strip():
        insert_at -= 1
    lines.insert(insert_at, f"{key} = {value}")


def update_ini_file(
    path: str,
    updates: Mapping[str, Mapping[str, str]],
    *,
    encoding: str = "utf-8",
) -> None:
    """Write *updates* (``{section: {key: value}}``) into *path* in place."""

    ini_path = Path(path)
    if ini_path.exists():
        raw = ini_path.read_text(encoding=encoding)
        newline = "\r\n" if "\r\n" in raw else "\n"
        lines = raw.splitlines()
    else:
        newline = "\n"
        lines = []

    for section, values in updates.items():
        for key, value in values.items():
            _set_option(lines, section, key, value)

    ini_path.parent.mkdir(parents=True, exist_ok=True)
    text = newline.join(lines)
    if lines:
        text += newline
    ini_path.write_text(text, encoding=encoding)
