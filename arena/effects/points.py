"""Lifecycle point table.

Every point has one combination policy and names the context fields its
handlers may change. Entities and formats contribute handlers by point name;
the dispatcher looks the policy up here, never on the handler.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from arena.core.errors import UnknownLifecyclePoint

class Policy(str, Enum):
    VETO = "veto"          # all run, problems concatenate
    MUTATE = "mutate"      # fixed precedence, each sees prior mutations
    REACT = "react"        # registration order, STOP ends the pass
    OVERRIDE = "override"  # first numeric result wins

@dataclass(frozen=True)
class LifecyclePoint:
    name: str
    policy: Policy
    mutable: Tuple[str, ...] = ()
    description: str = ""

_POINTS = [
    LifecyclePoint("validateTeam", Policy.VETO, ("team",), "whole-team validator; returns problem strings"),
    LifecyclePoint("validateSet", Policy.VETO, ("entry",), "single-set validator; may normalize the entry"),
    LifecyclePoint("onBegin", Policy.REACT, (), "match begin"),
    LifecyclePoint("onSwitchIn", Policy.REACT, (), "participant enters the field"),
    LifecyclePoint("onBeforeMove", Policy.REACT, (), "before a move executes; STOP cancels the move"),
    LifecyclePoint("onModifyMove", Policy.MUTATE, ("move",), "per-use move copy adjustments"),
    LifecyclePoint("onModifyPokemon", Policy.MUTATE, ("data",), "participant-level modifiers"),
    LifecyclePoint("onModifyDamage", Policy.MUTATE, ("data",), "final damage adjustments (data['damage'])"),
    LifecyclePoint("onImmunity", Policy.OVERRIDE, (), "held immunity checked ahead of the chart; a number is final"),
    LifecyclePoint("onEffectiveness", Policy.OVERRIDE, (), "type effectiveness multiplier"),
    LifecyclePoint("onHit", Policy.REACT, (), "after a move connects"),
    LifecyclePoint("onFaint", Policy.REACT, (), "participant fainted"),
    LifecyclePoint("onEat", Policy.REACT, (), "held berry consumed"),
    LifecyclePoint("onSetStatus", Policy.REACT, (), "major status about to apply; STOP blocks it"),
    LifecyclePoint("onResidual", Policy.REACT, (), "end of turn"),
]

POINTS: Dict[str, LifecyclePoint] = {p.name: p for p in _POINTS}

def get_point(name: str) -> LifecyclePoint:
    try:
        return POINTS[name]
    except KeyError:
        raise UnknownLifecyclePoint(name) from None

def is_point(name: str) -> bool:
    return name in POINTS

__all__ = ["Policy","LifecyclePoint","POINTS","get_point","is_point"]
