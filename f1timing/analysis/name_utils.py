"""
name_utils.py

Static driver and team lookup tables for display. The packet only carries
numeric ids; everything here is presentation-side.
"""

from types import MappingProxyType
from typing import Mapping

UNKNOWN_DRIVER = "???"

DRIVERS: Mapping[int, str] = MappingProxyType({
    9: "HAM",
    15: "BOT",
    16: "RIC",
    22: "VER",
    0: "VET",
    6: "RÄI",
    5: "PER",
    33: "OCO",
    3: "MAS",
    35: "STR",
    2: "ALO",
    34: "VAN",
    23: "SAI",
    1: "KVY",
    7: "GRO",
    14: "MAG",
    10: "HUL",
    20: "PAL",
    18: "ERI",
    31: "WEH",
})

TEAMS: Mapping[int, str] = MappingProxyType({
    4: "Mercedes",
    0: "Redbull",
    1: "Ferrari",
    6: "Force India",
    7: "Williams",
    2: "McLaren",
    8: "Toro Rosso",
    11: "Haas",
    3: "Renault",
    5: "Sauber",
})

TYRE_COMPOUNDS: Mapping[int, str] = MappingProxyType({
    0: "Ultra Soft",
    1: "Super Soft",
    2: "Soft",
    3: "Medium",
    4: "Hard",
    5: "Inter",
    6: "Wet",
})


def driver_code(driver_id: int) -> str:
    return DRIVERS.get(driver_id, UNKNOWN_DRIVER)


def team_name(team_id: int) -> str:
    return TEAMS.get(team_id, "")


def tyre_name(compound: int) -> str:
    return TYRE_COMPOUNDS.get(compound, "")
