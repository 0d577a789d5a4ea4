"""
lap_times.py

Formats the tracked car's lap history for the laps table and picks out the
fastest value of each column. Returns plain strings and optional color hints.
"""

import math
from typing import List, Optional, Sequence, Tuple

from f1timing.core.lap_history import SECTOR3, TOTAL, LapRecord

Cell = Tuple[str, Optional[str]]


def format_lap_time(seconds: float) -> str:
    """Format seconds as M:SS.ffff (fraction truncated, not rounded); "" if not finite."""
    if not math.isfinite(seconds):
        return ""
    minutes = int(seconds) // 60
    seconds -= minutes * 60
    whole = int(seconds)
    fraction = int((seconds - whole) * 10000)
    return f"{minutes}:{whole:02d}.{fraction:04d}"


def is_in_progress(history: Sequence[LapRecord], lap_idx: int, slot: int) -> bool:
    """
    True for cells of the last lap that are still moving: its sector 3 and
    total always, an earlier sector while the next one is still unknown.
    """
    if lap_idx != len(history) - 1:
        return False
    if slot in (SECTOR3, TOTAL):
        return True
    return history[lap_idx][slot + 1] == 0


def fastest_slots(history: Sequence[LapRecord]) -> List[Optional[float]]:
    """Lowest positive settled value per column (sector 1/2/3, total)."""
    best: List[Optional[float]] = [None, None, None, None]
    for lap_idx, lap in enumerate(history):
        for slot, value in enumerate(lap):
            if is_in_progress(history, lap_idx, slot):
                continue
            if value > 0 and (best[slot] is None or value < best[slot]):
                best[slot] = value
    return best


def lap_table_rows(
    history: Sequence[LapRecord],
    fastest_color: Optional[str] = None,
    current_color: Optional[str] = None,
) -> List[List[Cell]]:
    """
    Return one row per lap: ``[(lap_no, None), s1, s2, s3, total]`` where each
    timing cell is (text, color). Zero values render empty.
    - current_color for cells still moving on the last lap
    - fastest_color for the best settled value of a column
    """
    best = fastest_slots(history)
    rows: List[List[Cell]] = []
    for lap_idx, lap in enumerate(history):
        row: List[Cell] = [(f"{lap_idx + 1:2d}", None)]
        for slot, value in enumerate(lap):
            text = format_lap_time(value) if value > 0 else ""
            color = None
            if is_in_progress(history, lap_idx, slot):
                color = current_color
            elif best[slot] is not None and value == best[slot]:
                color = fastest_color
            row.append((text, color))
        rows.append(row)
    return rows
