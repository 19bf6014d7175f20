from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Set, Tuple

from arena.core.ids import ban_key, to_id
from arena.effects.handlers import EffectHandler
from arena.effects.library import HandlerRef

class BanKind(str, Enum):
    SPECIES = "species"
    ITEM = "item"
    ABILITY = "ability"
    MOVE = "move"
    TAG = "tag"
    COMBO = "combo"            # "A + B": all on one participant
    TEAM_COMBO = "team_combo"  # "A ++ B": all somewhere in the team
    RULE = "rule"              # "Ignore Illegal Abilities" etc.

# Active ids of one set (or a whole team), keyed by the BanKind they answer to
Active = Mapping[str, Set[str]]

@dataclass(frozen=True)
class BanEntry:
    kind: BanKind
    matchers: Tuple[Tuple[BanKind, str], ...]
    raw: str

    def _hit(self, kind: BanKind, ident: str, active: Active) -> bool:
        if kind == BanKind.TAG:
            return any(ident in ids for ids in active.values())
        return ident in active.get(kind.value, ())

    def matches(self, active: Active) -> bool:
        if self.kind == BanKind.RULE:
            return False
        return all(self._hit(k, i, active) for k, i in self.matchers)

@dataclass(frozen=True)
class RuleFragment:
    name: str
    ruleset: Tuple[str, ...] = ()
    banlist: Tuple[str, ...] = ()
    hooks: Mapping[str, Tuple[HandlerRef, ...]] = field(default_factory=dict)
    desc: str = ""

    @property
    def id(self) -> str:
        return to_id(self.name)

    @property
    def is_format(self) -> bool:
        return False

@dataclass(frozen=True)
class Format(RuleFragment):
    section: str = ""
    column: int = 1
    mod: str = ""
    game_type: str = "singles"
    team: str = ""
    min_team_size: int = 1
    max_team_size: int = 6
    max_level: int = 100
    default_level: int = 100
    max_forced_level: Optional[int] = None
    max_moves: int = 4
    search_show: bool = True
    challenge_show: bool = True
    rated: bool = True
    debug: bool = False
    can_use_random_team: bool = False

    @property
    def is_format(self) -> bool:
        return True

    @classmethod
    def from_fragment(cls, fragment: RuleFragment) -> "Format":
        return cls(name=fragment.name, ruleset=fragment.ruleset, banlist=fragment.banlist,
                   hooks=fragment.hooks, desc=fragment.desc)

@dataclass(frozen=True)
class ResolvedRuleSet:
    format: Format
    chain: Tuple[str, ...]
    banlist: FrozenSet[str]
    bans: Tuple[BanEntry, ...] = ()
    allowed: FrozenSet[str] = frozenset()
    rules: FrozenSet[str] = frozenset()
    hooks: Mapping[str, Tuple[EffectHandler, ...]] = field(default_factory=dict)
    mod: str = ""

    def __post_init__(self):
        object.__setattr__(self, "hooks", MappingProxyType(dict(self.hooks)))

    @property
    def name(self) -> str:
        return self.format.name

    @property
    def id(self) -> str:
        return self.format.id

    def hooks_for(self, point: str) -> Tuple[EffectHandler, ...]:
        return self.hooks.get(point, ())

    def has_rule(self, rule: str) -> bool:
        return to_id(rule) in self.rules

    def is_allowed(self, name: Optional[str]) -> bool:
        return bool(name) and ban_key(name) in self.allowed

__all__ = ["BanKind","BanEntry","RuleFragment","Format","ResolvedRuleSet","Active"]
