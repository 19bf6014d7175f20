"""Ban string parsing.

    "Soul Dew"                 single entity (kind looked up in the registry)
    "Uber"                     tag (tier / nonstandard marker / Unreleased)
    "Shedinja + Sturdy"        combo on one participant
    "Drizzle ++ Swift Swim"    combo anywhere in the team
    "Ignore Illegal Abilities" rule marker
    "Allow CAP"                re-permits CAP (removes it from the inherited banlist)
"""
from __future__ import annotations
from typing import Any, Optional, Tuple

from arena.core.ids import to_id
from arena.entities.types import EntityKind
from .types import BanEntry, BanKind

ALLOW_PREFIX = "allow "
RULE_PREFIX = "ignore "

_LOOKUP_ORDER = (
    (EntityKind.SPECIES, BanKind.SPECIES),
    (EntityKind.ITEM, BanKind.ITEM),
    (EntityKind.ABILITY, BanKind.ABILITY),
    (EntityKind.MOVE, BanKind.MOVE),
)

def allow_target(entry: str) -> Optional[str]:
    text = entry.strip()
    if text.lower().startswith(ALLOW_PREFIX):
        return text[len(ALLOW_PREFIX):].strip()
    return None

def is_rule(entry: str) -> bool:
    return entry.strip().lower().startswith(RULE_PREFIX)

def classify(name: str, entities: Any = None) -> Tuple[BanKind, str]:
    ident = to_id(name)
    if entities is not None:
        for ekind, bkind in _LOOKUP_ORDER:
            if entities.find(ekind, ident) is not None:
                return bkind, ident
    return BanKind.TAG, ident

def parse_ban(entry: str, entities: Any = None) -> BanEntry:
    text = entry.strip()
    if is_rule(text):
        return BanEntry(BanKind.RULE, ((BanKind.RULE, to_id(text)),), text)
    if "++" in text:
        parts = [p for p in (s.strip() for s in text.split("++")) if p]
        return BanEntry(BanKind.TEAM_COMBO, tuple(classify(p, entities) for p in parts), text)
    if "+" in text:
        parts = [p for p in (s.strip() for s in text.split("+")) if p]
        return BanEntry(BanKind.COMBO, tuple(classify(p, entities) for p in parts), text)
    kind, ident = classify(text, entities)
    return BanEntry(kind, ((kind, ident),), text)

__all__ = ["ALLOW_PREFIX","allow_target","is_rule","classify","parse_ban"]
