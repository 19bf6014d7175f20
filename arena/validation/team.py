"""Team and set validation against a resolved rule set.

Problems are user-facing strings; an empty list means the team is accepted.
Validators may normalize an entry (forced level, forced moves), so every
check runs on copies and `check_team` hands the normalized copies back.
"""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from arena.battle.models import TeamSet
from arena.core.ids import to_id
from arena.effects.dispatcher import HookDispatcher
from arena.effects.handlers import HookContext
from arena.entities.types import EntityKind
from arena.formats.types import BanKind, ResolvedRuleSet

def _as_set(entry: Any) -> TeamSet:
    if isinstance(entry, TeamSet):
        return entry.copy()
    return TeamSet.from_dict(entry)

def _tags(entity: Any) -> Set[str]:
    tags = set()
    if entity is None:
        return tags
    if entity.get("tier"):
        tags.add(to_id(entity.get("tier")))
    if entity.nonstandard:
        tags.add(to_id(entity.nonstandard))
    if entity.get("unreleased"):
        tags.add("unreleased")
    return tags

def active_ids(entry: TeamSet, entities: Any) -> Dict[str, Set[str]]:
    """Ids of everything one set brings, keyed the way BanEntry matchers look them up."""
    species = entities.find(EntityKind.SPECIES, entry.species)
    item = entities.find(EntityKind.ITEM, entry.item) if entry.item else None
    ability = entities.find(EntityKind.ABILITY, entry.ability) if entry.ability else None
    moves = [entities.find(EntityKind.MOVE, m) for m in entry.moves]
    active: Dict[str, Set[str]] = {
        BanKind.SPECIES.value: {to_id(entry.species)},
        BanKind.ITEM.value: {to_id(entry.item)} if entry.item else set(),
        BanKind.ABILITY.value: {to_id(entry.ability)} if entry.ability else set(),
        BanKind.MOVE.value: {to_id(m) for m in entry.moves},
        BanKind.TAG.value: set(),
    }
    if species is not None and species.get("baseSpecies"):
        active[BanKind.SPECIES.value].add(to_id(species.get("baseSpecies")))
    for entity in [species, item, ability, *moves]:
        active[BanKind.TAG.value] |= _tags(entity)
    return active

def _merge(into: Dict[str, Set[str]], other: Dict[str, Set[str]]):
    for key, ids in other.items():
        into.setdefault(key, set()).update(ids)

def _dispatcher(ruleset: ResolvedRuleSet, entities: Any, dispatcher: Optional[HookDispatcher]) -> HookDispatcher:
    return dispatcher if dispatcher is not None else HookDispatcher(ruleset, entities)

# ---------------------------------------------------------------------------
# Set level
# ---------------------------------------------------------------------------

def _normalize(entry: TeamSet, ruleset: ResolvedRuleSet):
    fmt = ruleset.format
    if entry.level is None:
        entry.level = fmt.default_level
    if fmt.max_forced_level and entry.level > fmt.max_forced_level:
        entry.forced_level = fmt.max_forced_level

def _structural(entry: TeamSet, ruleset: ResolvedRuleSet) -> List[str]:
    fmt = ruleset.format
    name = entry.display_name
    problems = []
    if entry.level is not None and entry.level > fmt.max_level:
        problems.append(f"{name} is higher than level {fmt.max_level}.")
    if entry.level is not None and entry.level < 1:
        problems.append(f"{name} is lower than level 1.")
    if not entry.moves:
        problems.append(f"{name} has no moves.")
    if len(entry.moves) > fmt.max_moves:
        problems.append(f"{name} has more than {fmt.max_moves} moves.")
    seen = set()
    for move in entry.moves:
        mid = to_id(move)
        if mid in seen:
            problems.append(f"{name} has {move} more than once.")
        seen.add(mid)
    return problems

def _entities(entry: TeamSet, ruleset: ResolvedRuleSet, entities: Any) -> List[str]:
    problems = []
    lookups = [(EntityKind.SPECIES, entry.species, "Pokemon")]
    if entry.item:
        lookups.append((EntityKind.ITEM, entry.item, "item"))
    if entry.ability:
        lookups.append((EntityKind.ABILITY, entry.ability, "ability"))
    lookups += [(EntityKind.MOVE, m, "move") for m in entry.moves]
    for kind, name, label in lookups:
        found = entities.find(kind, name)
        if found is None:
            problems.append(f"{name or '(blank)'} is not a recognized {label}.")
        elif found.nonstandard and not (ruleset.is_allowed(found.nonstandard) or ruleset.is_allowed(found.name)):
            problems.append(f"{found.name} is not available ({found.nonstandard}).")
    return problems

def _set_bans(entry: TeamSet, ruleset: ResolvedRuleSet, active: Dict[str, Set[str]]) -> List[str]:
    problems = []
    for ban in ruleset.bans:
        if ban.kind in (BanKind.RULE, BanKind.TEAM_COMBO):
            continue
        if not ban.matches(active):
            continue
        if ban.kind == BanKind.TAG:
            problems.append(f"{entry.display_name} uses something in {ban.raw}, which is banned.")
        elif ban.kind == BanKind.COMBO:
            problems.append(f"{entry.display_name} has the combination of {ban.raw}, which is banned.")
        else:
            problems.append(f"{ban.raw} is banned.")
    return problems

def _check_set(entry: TeamSet, ruleset: ResolvedRuleSet, entities: Any, dispatcher: HookDispatcher) -> List[str]:
    _normalize(entry, ruleset)
    ctx = HookContext("validateSet", entry=entry, ruleset=ruleset, entities=entities)
    hooked = dispatcher.dispatch("validateSet", ctx)
    entry = ctx.entry
    if not entry.species:
        return ["A team member has no species."] + hooked.problems
    problems = _structural(entry, ruleset) + _entities(entry, ruleset, entities)
    problems += _set_bans(entry, ruleset, active_ids(entry, entities))
    return problems + hooked.problems

def validate_set(entry: Any, ruleset: ResolvedRuleSet, *, entities: Any,
                 dispatcher: Optional[HookDispatcher] = None) -> List[str]:
    return _check_set(_as_set(entry), ruleset, entities, _dispatcher(ruleset, entities, dispatcher))

# ---------------------------------------------------------------------------
# Team level
# ---------------------------------------------------------------------------

def check_team(team: Iterable[Any], ruleset: ResolvedRuleSet, *, entities: Any,
               dispatcher: Optional[HookDispatcher] = None) -> Tuple[List[TeamSet], List[str]]:
    """Validate a team; returns (normalized copies, problems)."""
    dispatcher = _dispatcher(ruleset, entities, dispatcher)
    fmt = ruleset.format
    sets = [_as_set(e) for e in team]
    problems: List[str] = []
    if len(sets) < fmt.min_team_size:
        problems.append(f"You must bring at least {fmt.min_team_size} Pokemon.")
    if len(sets) > fmt.max_team_size:
        problems.append(f"You may only bring up to {fmt.max_team_size} Pokemon.")

    team_active: Dict[str, Set[str]] = {}
    for entry in sets:
        problems += _check_set(entry, ruleset, entities, dispatcher)
        if entry.species:
            _merge(team_active, active_ids(entry, entities))

    for ban in ruleset.bans:
        if ban.kind == BanKind.TEAM_COMBO and ban.matches(team_active):
            problems.append(f"Your team has the combination of {ban.raw}, which is banned.")

    ctx = HookContext("validateTeam", team=sets, ruleset=ruleset, entities=entities)
    problems += dispatcher.dispatch("validateTeam", ctx).problems
    return sets, problems

def validate_team(team: Iterable[Any], ruleset: ResolvedRuleSet, *, entities: Any,
                  dispatcher: Optional[HookDispatcher] = None) -> List[str]:
    return check_team(team, ruleset, entities=entities, dispatcher=dispatcher)[1]

__all__ = ["active_ids","validate_set","validate_team","check_team"]
