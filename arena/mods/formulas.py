"""Baseline formulas used when the active mod variant defines no override.

    stat(stat, base, level, nature)  -> int
    base_stats(species)              -> {"hp": .., "atk": .., ...}
    effectiveness(move_type, types)  -> multiplier
"""
from __future__ import annotations
from typing import Any, Dict, Optional, Tuple

STATS = ("hp", "atk", "def", "spa", "spd", "spe")

TYPE_CHART: Dict[str, Dict[str, float]] = {
    "normal":  {"rock": 0.5, "ghost": 0.0, "steel": 0.5},
    "fire":    {"fire": 0.5, "water": 0.5, "grass": 2.0, "ice": 2.0, "bug": 2.0, "rock": 0.5, "dragon": 0.5, "steel": 2.0},
    "water":   {"fire": 2.0, "water": 0.5, "grass": 0.5, "ground": 2.0, "rock": 2.0, "dragon": 0.5},
    "grass":   {"fire": 0.5, "water": 2.0, "grass": 0.5, "poison": 0.5, "ground": 2.0, "flying": 0.5, "bug": 0.5, "rock": 2.0, "dragon": 0.5, "steel": 0.5},
    "electric":{"water": 2.0,"electric": 0.5,"grass": 0.5,"ground": 0.0,"flying": 2.0,"dragon": 0.5},
    "ice":     {"fire": 0.5,"water": 0.5,"grass": 2.0,"ice": 0.5,"ground": 2.0,"flying": 2.0,"dragon": 2.0,"steel": 0.5},
    "fighting":{"normal": 2.0,"ice": 2.0,"rock": 2.0,"dark": 2.0,"steel": 2.0,"poison": 0.5,"flying": 0.5,"psychic": 0.5,"bug": 0.5,"fairy": 0.5,"ghost": 0.0},
    "poison":  {"grass": 2.0,"fairy": 2.0,"poison": 0.5,"ground": 0.5,"rock": 0.5,"ghost": 0.5,"steel": 0.0},
    "ground":  {"fire": 2.0,"electric": 2.0,"poison": 2.0,"rock": 2.0,"steel": 2.0,"grass": 0.5,"bug": 0.5,"flying": 0.0},
    "flying":  {"grass": 2.0,"fighting": 2.0,"bug": 2.0,"electric": 0.5,"rock": 0.5,"steel": 0.5},
    "psychic": {"fighting": 2.0,"poison": 2.0,"psychic": 0.5,"steel": 0.5,"dark": 0.0},
    "bug":     {"grass": 2.0,"psychic": 2.0,"dark": 2.0,"fire": 0.5,"fighting": 0.5,"poison": 0.5,"flying": 0.5,"ghost": 0.5,"steel": 0.5,"fairy": 0.5},
    "rock":    {"fire": 2.0,"ice": 2.0,"flying": 2.0,"bug": 2.0,"fighting": 0.5,"ground": 0.5,"steel": 0.5},
    "ghost":   {"ghost": 2.0,"psychic": 2.0,"dark": 0.5,"normal": 0.0},
    "dragon":  {"dragon": 2.0,"steel": 0.5,"fairy": 0.0},
    "dark":    {"ghost": 2.0,"psychic": 2.0,"fighting": 0.5,"dark": 0.5,"fairy": 0.5},
    "steel":   {"ice": 2.0,"rock": 2.0,"fairy": 2.0,"fire": 0.5,"water": 0.5,"electric": 0.5,"steel": 0.5},
    "fairy":   {"fighting": 2.0,"dragon": 2.0,"dark": 2.0,"fire": 0.5,"poison": 0.5,"steel": 0.5},
}

# (plus, minus); neutral natures are absent
NATURES: Dict[str, Tuple[str, str]] = {
    "lonely": ("atk", "def"), "brave": ("atk", "spe"), "adamant": ("atk", "spa"), "naughty": ("atk", "spd"),
    "bold": ("def", "atk"), "relaxed": ("def", "spe"), "impish": ("def", "spa"), "lax": ("def", "spd"),
    "timid": ("spe", "atk"), "hasty": ("spe", "def"), "jolly": ("spe", "spa"), "naive": ("spe", "spd"),
    "modest": ("spa", "atk"), "mild": ("spa", "def"), "quiet": ("spa", "spe"), "rash": ("spa", "spd"),
    "calm": ("spd", "atk"), "gentle": ("spd", "def"), "sassy": ("spd", "spe"), "careful": ("spd", "spa"),
}

def nature_minus(nature: Optional[str]) -> Optional[str]:
    pair = NATURES.get((nature or "").lower())
    return pair[1] if pair else None

def stat(stat_name: str, base: int, level: int, nature: Optional[str] = None) -> int:
    if stat_name == "hp":
        return int(((2*base)*level)/100 + level + 10)
    value = int(((2*base)*level)/100 + 5)
    pair = NATURES.get((nature or "").lower())
    if pair:
        if pair[0] == stat_name:
            value = int(value * 1.1)
        elif pair[1] == stat_name:
            value = int(value * 0.9)
    return value

def base_stats(species: Any) -> Dict[str, int]:
    raw = species.get("baseStats") or {}
    return {s: int(raw.get(s, 0)) for s in STATS}

def chart_effectiveness(chart: Dict[str, Dict[str, float]], move_type: str, target_types) -> float:
    mult = 1.0
    offense = chart.get((move_type or "").lower(), {})
    for t in target_types:
        mult *= offense.get(t.lower(), 1.0)
    return mult

def effectiveness(move_type: str, target_types) -> float:
    return chart_effectiveness(TYPE_CHART, move_type, target_types)

DEFAULTS = {
    "stat": stat,
    "base_stats": base_stats,
    "effectiveness": effectiveness,
}

__all__ = ["STATS","TYPE_CHART","NATURES","nature_minus","stat","base_stats","effectiveness","chart_effectiveness","DEFAULTS"]
