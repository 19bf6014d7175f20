"""Thin match harness driving the hook dispatcher.

A Match resolves its format once at construction and keeps that snapshot
(rule set, entity view, dispatcher) for its whole lifetime, so a
configuration reload never changes the rules of a match in progress.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional
import random

from arena.core.errors import ValidationRejection
from arena.core.logging import logger
from arena.effects.handlers import HookContext
from arena.entities.types import EntityKind
from arena.validation.team import check_team
from .models import MoveUse, Participant, TeamSet

SIDES = ("p1", "p2")

@dataclass
class Side:
    id: str
    members: List[Participant]
    active_index: int = 0

    def active(self) -> Participant:
        return self.members[self.active_index]

    def has_available(self) -> bool:
        return any(not m.fainted for m in self.members)

    def auto_switch_if_fainted(self) -> Optional[Participant]:
        if not self.active().fainted:
            return None
        for i, m in enumerate(self.members):
            if not m.fainted:
                self.active_index = i
                return m
        return None

@dataclass
class MoveResult:
    move: Optional[MoveUse]
    damage: int = 0
    effectiveness: float = 1.0
    cancelled: bool = False
    fainted: bool = False

class Match:
    def __init__(self, engine: Any, format_name: str, teams: Mapping[str, Iterable[Any]], *,
                 rng: Optional[random.Random] = None, mod: Optional[str] = None):
        self.ruleset = engine.resolve(format_name, mod)
        self.dispatcher = engine.dispatcher(self.ruleset)
        self.entities = self.dispatcher.entities
        self.rng = rng or random.Random()
        self.log: List[str] = []
        self.winner: Optional[str] = None
        self.turn = 0

        problems: List[str] = []
        normalized: Dict[str, List[TeamSet]] = {}
        for side_id in SIDES:
            sets, found = check_team(teams.get(side_id, []), self.ruleset,
                                     entities=self.entities, dispatcher=self.dispatcher)
            normalized[side_id] = sets
            problems += [f"{side_id}: {p}" for p in found]
        if problems:
            raise ValidationRejection(problems)

        self.sides: Dict[str, Side] = {
            side_id: Side(side_id, [self._build(side_id, entry) for entry in sets])
            for side_id, sets in normalized.items()
        }
        logger.debug("MatchCreated", format=self.ruleset.name, mod=self.ruleset.mod or "-")

    # ------------------------------------------------------------------
    # Battle handle used by handlers
    # ------------------------------------------------------------------
    @property
    def format(self):
        return self.ruleset.format

    @property
    def faults(self):
        return self.dispatcher.faults

    def add(self, message: str):
        self.log.append(message)

    def side(self, side_id: str) -> List[Participant]:
        return self.sides[side_id].members

    def foe(self, side_id: str) -> Side:
        return self.sides["p2" if side_id == "p1" else "p1"]

    def active(self, side_id: str) -> Participant:
        return self.sides[side_id].active()

    def truncate(self, size: int):
        for s in self.sides.values():
            s.members = s.members[:size]
            s.active_index = min(s.active_index, len(s.members) - 1)
        self.add(f"Cutting down to {size}.")

    def win(self, side_id: str):
        if self.winner is not None:
            return
        self.winner = side_id
        self.add(f"{side_id} won the battle!")

    def is_over(self) -> bool:
        return self.winner is not None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def _build(self, side_id: str, entry: TeamSet) -> Participant:
        species = self.entities.get(EntityKind.SPECIES, entry.species)
        base = self.dispatcher.formula("base_stats")(species)
        stat = self.dispatcher.formula("stat")
        level = entry.forced_level or entry.level or self.format.default_level
        stats = {s: stat(s, v, level, entry.nature) for s, v in base.items()}
        p = Participant(
            side=side_id, set=entry, species=species, level=level, stats=stats,
            types=tuple(str(t).lower() for t in species.get("types", ())),
            ability=self.entities.find(EntityKind.ABILITY, entry.ability) if entry.ability else None,
            item=self.entities.find(EntityKind.ITEM, entry.item) if entry.item else None,
        )
        ctx = HookContext("onModifyPokemon", battle=self, source=p, data={"stats": p.stats})
        self.dispatcher.dispatch("onModifyPokemon", ctx)
        p.stats = ctx.data["stats"]
        p.negate_immunity = bool(ctx.data.get("negate_immunity"))
        p.hp = p.max_hp
        return p

    # ------------------------------------------------------------------
    # Lifecycle junctures
    # ------------------------------------------------------------------
    def begin(self):
        self.dispatcher.dispatch("onBegin", HookContext("onBegin", battle=self))
        for side_id in SIDES:
            self.switch_in(side_id)

    def switch_in(self, side_id: str, index: Optional[int] = None) -> Participant:
        side = self.sides[side_id]
        if index is not None:
            side.active_index = index
        p = side.active()
        self.add(f"{side_id} sent out {p.name}!")
        foe = self.foe(side_id).active() if self.foe(side_id).members else None
        self.dispatcher.dispatch("onSwitchIn", HookContext("onSwitchIn", battle=self, source=p, target=foe))
        return p

    def use_move(self, side_id: str, move_name: str) -> MoveResult:
        attacker = self.active(side_id)
        defender = self.foe(side_id).active()
        if self.is_over() or attacker.fainted:
            return MoveResult(None, cancelled=True)
        move = MoveUse.from_entity(self.entities.get(EntityKind.MOVE, move_name))

        before = self.dispatcher.dispatch("onBeforeMove", HookContext(
            "onBeforeMove", battle=self, source=attacker, target=defender, move=move))
        if before.stopped:
            return MoveResult(move, cancelled=True)

        self.dispatcher.dispatch("onModifyMove", HookContext(
            "onModifyMove", battle=self, source=attacker, target=defender, move=move))
        self.add(f"{attacker.name} used {move.name}!")

        result = MoveResult(move)
        if move.category != "status":
            result.effectiveness = self.dispatcher.effectiveness(move, attacker, defender, battle=self)
            if result.effectiveness == 0:
                self.add(f"It doesn't affect {defender.name}...")
                return result
            ctx = HookContext("onModifyDamage", battle=self, source=attacker, target=defender, move=move,
                              data={"damage": self._damage(attacker, defender, move, result.effectiveness),
                                    "effectiveness": result.effectiveness})
            self.dispatcher.dispatch("onModifyDamage", ctx)
            result.damage = defender.damage(int(ctx.data["damage"]))

        self.dispatcher.dispatch("onHit", HookContext(
            "onHit", battle=self, source=attacker, target=defender, move=move))
        if defender.fainted:
            result.fainted = True
            self._faint(defender, attacker)
        return result

    def _damage(self, attacker: Participant, defender: Participant, move: MoveUse, eff: float) -> int:
        if move.base_power <= 0:
            return 0
        atk_stat, def_stat = ("atk", "def") if move.category == "physical" else ("spa", "spd")
        a = max(1, attacker.effective_stat(atk_stat))
        d = max(1, defender.effective_stat(def_stat))
        base = ((2 * attacker.level / 5 + 2) * move.base_power * a / d) / 50 + 2
        stab = 1.5 if attacker.has_type(move.type) else 1.0
        return max(1, int(base * stab * eff))

    def _faint(self, fainted: Participant, source: Optional[Participant]):
        self.add(f"{fainted.name} fainted!")
        self.dispatcher.dispatch("onFaint", HookContext("onFaint", battle=self, source=source, target=fainted))
        if self.winner is None and not self.sides[fainted.side].has_available():
            self.win(self.foe(fainted.side).id)

    def eat_item(self, side_id: str) -> bool:
        p = self.active(side_id)
        item = p.active_item()
        if item is None or not item.get("isBerry"):
            return False
        self.add(f"{p.name} ate its {item.name}!")
        self.dispatcher.dispatch("onEat", HookContext("onEat", battle=self, source=p))
        p.item_consumed = True
        return True

    def set_status(self, side_id: str, status: str, source: Optional[Participant] = None) -> bool:
        target = self.active(side_id)
        if target.status or target.fainted:
            return False
        ctx = HookContext("onSetStatus", battle=self, source=source, target=target, data={"status": status})
        result = self.dispatcher.dispatch("onSetStatus", ctx)
        if result.stopped or ctx.data.get("blocked"):
            return False
        target.status = status
        self.add(f"{target.name} is now {status}.")
        return True

    def residual(self):
        for side_id in SIDES:
            p = self.active(side_id)
            if not p.fainted:
                self.dispatcher.dispatch("onResidual", HookContext("onResidual", battle=self, source=p))
        self.turn += 1

__all__ = ["Match","Side","MoveResult"]
