"""Built-in mod variants.

gen5        type chart before Fairy; Steel resists Ghost and Dark
gen7        entity overlays only (loaded from assets/mods/gen7)
statswitch  base stats reversed (HP<->Spe, Atk<->SpD, Def<->SpA)
averagemons every base stat is 100
350cup      base stats doubled when BST is 350 or lower
tiershift   non-HP base stats raised by tier
"""
from __future__ import annotations
from typing import Any, Dict

from . import formulas
from .variants import ModRegistry, ModVariant

def _gen5_chart() -> Dict[str, Dict[str, float]]:
    chart = {atk: {d: m for d, m in row.items() if d != "fairy"}
             for atk, row in formulas.TYPE_CHART.items() if atk != "fairy"}
    chart["ghost"]["steel"] = 0.5
    chart["dark"]["steel"] = 0.5
    return chart

GEN5_CHART = _gen5_chart()

def gen5_effectiveness(move_type: str, target_types) -> float:
    return formulas.chart_effectiveness(GEN5_CHART, move_type, target_types)

def statswitch_base_stats(species: Any) -> Dict[str, int]:
    stats = formulas.base_stats(species)
    values = [stats[s] for s in formulas.STATS]
    return dict(zip(formulas.STATS, reversed(values)))

def averagemons_base_stats(species: Any) -> Dict[str, int]:
    return {s: 100 for s in formulas.STATS}

def cup350_base_stats(species: Any) -> Dict[str, int]:
    stats = formulas.base_stats(species)
    if sum(stats.values()) <= 350:
        return {s: v * 2 for s, v in stats.items()}
    return stats

TIER_BOOSTS = {"uu": 5, "bl2": 5, "ru": 10, "bl3": 10, "nu": 15, "bl4": 15,
               "pu": 20, "nfe": 20, "lcuber": 20, "lc": 20}

def tiershift_base_stats(species: Any) -> Dict[str, int]:
    stats = formulas.base_stats(species)
    tier = "".join(c for c in str(species.get("tier", "")).lower() if c.isalnum())
    boost = TIER_BOOSTS.get(tier, 0)
    return {s: (v if s == "hp" else min(255, v + boost)) for s, v in stats.items()}

def builtin_variants():
    return [
        ModVariant("gen5", "[Gen 5]", "Black/White 2 mechanics", formulas={"effectiveness": gen5_effectiveness}),
        ModVariant("gen7", "[Gen 7]", "Sun/Moon item data"),
        ModVariant("statswitch", "Stat Switch", formulas={"base_stats": statswitch_base_stats}),
        ModVariant("averagemons", "Averagemons", formulas={"base_stats": averagemons_base_stats}),
        ModVariant("350cup", "350 Cup", formulas={"base_stats": cup350_base_stats}),
        ModVariant("tiershift", "Tier Shift", formulas={"base_stats": tiershift_base_stats}),
    ]

def register_builtin(mods: ModRegistry) -> ModRegistry:
    for variant in builtin_variants():
        mods.register(variant)
    return mods

__all__ = ["GEN5_CHART","TIER_BOOSTS","builtin_variants","register_builtin"]
