"""Battle-side value objects: team sets, per-use move copies and participants."""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from arena.core.ids import to_id

def _clamp_stage(stage: int) -> int: return max(-6, min(6, int(stage)))

def stage_multiplier(stage: int) -> float:
    s = _clamp_stage(stage)
    return (2 + s)/2 if s >= 0 else 2/(2 - s)

@dataclass
class TeamSet:
    species: str
    nickname: str = ""
    item: str = ""
    ability: str = ""
    moves: List[str] = field(default_factory=list)
    level: Optional[int] = None
    nature: str = ""
    forced_level: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "TeamSet":
        level = raw.get("level")
        forced = raw.get("forcedLevel", raw.get("forced_level"))
        return cls(
            species=str(raw.get("species", "")),
            nickname=str(raw.get("name") or raw.get("nickname") or ""),
            item=str(raw.get("item") or ""),
            ability=str(raw.get("ability") or ""),
            moves=[str(m) for m in raw.get("moves", [])],
            level=int(level) if level is not None else None,
            nature=str(raw.get("nature") or ""),
            forced_level=int(forced) if forced is not None else None,
        )

    def copy(self) -> "TeamSet":
        return TeamSet(self.species, self.nickname, self.item, self.ability, list(self.moves),
                       self.level, self.nature, self.forced_level)

    @property
    def display_name(self) -> str:
        return self.nickname or self.species

@dataclass
class MoveUse:
    """Mutable copy of a move for one use; the registry record stays untouched."""
    id: str
    name: str
    type: str = "normal"
    category: str = "status"
    base_power: int = 0
    accuracy: Any = True
    priority: int = 0
    flags: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)
    # Handlers attached to this use only (e.g. by an onModifyMove hook)
    hooks: Dict[str, List[Any]] = field(default_factory=dict)
    entity: Any = None

    @classmethod
    def from_entity(cls, entity: Any) -> "MoveUse":
        return cls(
            id=entity.id,
            name=entity.name,
            type=str(entity.get("type", "Normal")).lower(),
            category=str(entity.get("category", "Status")).lower(),
            base_power=int(entity.get("basePower", 0) or 0),
            accuracy=entity.get("accuracy", True),
            priority=int(entity.get("priority", 0) or 0),
            flags=dict(entity.get("flags") or {}),
            entity=entity,
        )

    _FIELDS = ("type", "category", "base_power", "accuracy", "priority", "flags", "name")
    _ALIASES = {"basePower": "base_power"}

    def get(self, key: str, default: Any = None) -> Any:
        key = self._ALIASES.get(key, key)
        if key in self._FIELDS:
            return getattr(self, key)
        return self.extra.get(key, default)

    def set(self, key: str, value: Any):
        key = self._ALIASES.get(key, key)
        if key == "type":
            value = str(value).lower()
        if key in self._FIELDS:
            setattr(self, key, value)
        else:
            self.extra[key] = value

    def snapshot(self) -> Dict[str, Any]:
        state = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "entity"}
        state["flags"] = dict(self.flags)
        state["extra"] = dict(self.extra)
        state["hooks"] = {k: list(v) for k, v in self.hooks.items()}
        return state

    def restore(self, state: Dict[str, Any]):
        for key, value in state.items():
            setattr(self, key, value)

    def attach(self, handler: Any):
        self.hooks.setdefault(handler.point, []).append(handler)

    def handlers_for(self, point: str) -> List[Any]:
        found = []
        if self.entity is not None and self.entity.handler(point) is not None:
            found.append(self.entity.handler(point))
        return found + list(self.hooks.get(point, ()))

@dataclass
class Participant:
    side: str
    set: TeamSet
    species: Any
    level: int
    stats: Dict[str, int]
    types: tuple = ()
    ability: Any = None
    item: Any = None
    volatiles: List[Any] = field(default_factory=list)
    boosts: Dict[str, int] = field(default_factory=dict)
    status: str = ""
    hp: Optional[int] = None
    item_consumed: bool = False
    negate_immunity: bool = False

    def __post_init__(self):
        if self.hp is None:
            self.hp = self.max_hp

    @property
    def name(self) -> str:
        return self.set.display_name

    @property
    def max_hp(self) -> int:
        return int(self.stats.get("hp", 1))

    @property
    def fainted(self) -> bool:
        return (self.hp or 0) <= 0

    def active_item(self) -> Any:
        return None if self.item_consumed else self.item

    def has_type(self, type_name: str) -> bool:
        return type_name.lower() in self.types

    def heal(self, amount: int) -> int:
        before = self.hp or 0
        self.hp = min(self.max_hp, before + max(0, int(amount)))
        return self.hp - before

    def damage(self, amount: int) -> int:
        before = self.hp or 0
        self.hp = max(0, before - max(0, int(amount)))
        return before - self.hp

    def boost(self, stat: str, stages: int) -> int:
        before = self.boosts.get(stat, 0)
        self.boosts[stat] = _clamp_stage(before + stages)
        return self.boosts[stat] - before

    def effective_stat(self, stat: str) -> int:
        return int(self.stats.get(stat, 0) * stage_multiplier(self.boosts.get(stat, 0)))

    def has_volatile(self, condition_id: str) -> bool:
        cid = to_id(condition_id)
        return any(v.id == cid for v in self.volatiles)

    def add_volatile(self, condition: Any) -> bool:
        if self.has_volatile(condition.id):
            return False
        self.volatiles.append(condition)
        return True

    def remove_volatile(self, condition_id: str):
        cid = to_id(condition_id)
        self.volatiles = [v for v in self.volatiles if v.id != cid]

__all__ = ["TeamSet","MoveUse","Participant","stage_multiplier"]
