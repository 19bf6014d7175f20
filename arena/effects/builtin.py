"""Built-in handler implementations referenced by name from configuration.

Each handler takes a HookContext plus keyword arguments bound from the
reference's `args`. Validators return lists of problem strings; react
handlers may return STOP; override handlers return a multiplier or None.
"""
from __future__ import annotations
from functools import partial
from typing import Any, Dict, List, Optional

from arena.core.ids import to_id
from arena.core.logging import logger
from arena.entities.types import EntityKind
from arena.mods import formulas
from .handlers import STOP, EffectHandler, HookContext
from .library import library

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _species(ctx: HookContext, entry: Any):
    if ctx.entities is None or entry is None:
        return None
    return ctx.entities.find(EntityKind.SPECIES, entry.species)

def _base_stats(ctx: HookContext, species: Any) -> Dict[str, int]:
    fn = ctx.dispatcher.formula("base_stats") if ctx.dispatcher is not None else formulas.base_stats
    return fn(species)

def _bst(ctx: HookContext, species: Any) -> int:
    return sum(_base_stats(ctx, species).values())

def _types(species: Any) -> List[str]:
    return [str(t).lower() for t in species.get("types", ())]

# ---------------------------------------------------------------------------
# validateTeam
# ---------------------------------------------------------------------------

def min_team_size(ctx: HookContext, size: int, message: str = ""):
    if len(ctx.team or []) < size:
        return [message or f"You must bring at least {size} Pokemon."]
    return []

def max_team_size(ctx: HookContext, size: int, message: str = ""):
    if len(ctx.team or []) > size:
        return [message or f"You may only bring up to {size} Pokemon."]
    return []

def exact_level(ctx: HookContext, level: int = 100):
    problems = []
    for entry in ctx.team or []:
        if entry.level and entry.level > level:
            problems.append(f"{entry.display_name} is higher than level {level}.")
        elif entry.level and entry.level < level:
            problems.append(f"{entry.display_name} is lower than level {level}.")
    return problems

def unique_initials(ctx: HookContext):
    seen = set()
    for entry in ctx.team or []:
        species = _species(ctx, entry)
        name = species.name if species is not None else entry.species
        letter = name[:1].upper()
        if letter in seen:
            return [f'Your team cannot have more than one Pokemon starting with the letter "{letter}".']
        seen.add(letter)
    return []

def team_bst_cap(ctx: HookContext, cap: int):
    total = 0
    for entry in ctx.team or []:
        species = _species(ctx, entry)
        if species is not None:
            total += _bst(ctx, species)
    if total > cap:
        return [f"The combined BST of your team is greater than {cap}."]
    return []

def species_clause(ctx: HookContext):
    seen: Dict[str, str] = {}
    problems = []
    for entry in ctx.team or []:
        species = _species(ctx, entry)
        base = to_id(species.get("baseSpecies", species.name)) if species is not None else to_id(entry.species)
        if base in seen:
            problems.append(f"You are limited to one of each Pokemon by Species Clause (you have more than one {seen[base]}).")
        else:
            seen[base] = species.name if species is not None else entry.species
    return problems

def same_type_clause(ctx: HookContext):
    shared: Optional[set] = None
    for entry in ctx.team or []:
        species = _species(ctx, entry)
        if species is None:
            continue
        types = set(_types(species))
        shared = types if shared is None else shared & types
    if shared is not None and not shared:
        return ["Your team must share a type by Same Type Clause."]
    return []

def move_user_limit(ctx: HookContext, move: str, limit: int = 1, clause: str = ""):
    users = [e for e in ctx.team or [] if to_id(move) in {to_id(m) for m in e.moves}]
    if len(users) > limit:
        return [f"Only {limit} Pokemon may know {move}" + (f" by {clause}." if clause else ".")]
    return []

# ---------------------------------------------------------------------------
# validateSet
# ---------------------------------------------------------------------------

def bst_cap(ctx: HookContext, cap: int):
    species = _species(ctx, ctx.entry)
    if species is not None and _bst(ctx, species) > cap:
        return [f"You are limited to Pokemon with a BST of {cap} or lower by BST Clause."]
    return []

def force_moves(ctx: HookContext, moves: List[str]):
    ctx.entry.moves = list(moves)
    return []

def force_level(ctx: HookContext, level: int = 50):
    if not ctx.entry.level or ctx.entry.level >= level:
        ctx.entry.forced_level = level
    return []

def restricted_abilities(ctx: HookContext, abilities: List[str]):
    ability = to_id(ctx.entry.ability)
    if ability not in {to_id(a) for a in abilities}:
        return []
    species = _species(ctx, ctx.entry)
    natural = {to_id(a) for a in (species.get("abilities", {}) or {}).values()} if species is not None else set()
    if ability not in natural:
        return [f"The ability {ctx.entry.ability} is banned on Pokemon that do not naturally have it."]
    return []

def item_bst_restriction(ctx: HookContext, item: str, cap: int):
    if to_id(ctx.entry.item) != to_id(item):
        return []
    species = _species(ctx, ctx.entry)
    # unmodded base stats
    if species is not None and sum(formulas.base_stats(species).values()) <= cap:
        return [f"{item} is banned on Pokemon with {cap} or lower BST."]
    return []

def nonstandard_check(ctx: HookContext, max_moves: int = 4, max_level: int = 100):
    entry = ctx.entry
    problems = []
    checks = [(EntityKind.SPECIES, entry.species, "Pokemon"),
              (EntityKind.ITEM, entry.item, "item"),
              (EntityKind.ABILITY, entry.ability, "ability")]
    checks += [(EntityKind.MOVE, m, "move") for m in entry.moves]
    for kind, name, label in checks:
        if not name or ctx.entities is None:
            continue
        found = ctx.entities.find(kind, name)
        if found is not None and found.nonstandard:
            problems.append(f"{found.name} is not a real {label}.")
    if len(entry.moves) > max_moves:
        problems.append(f"{entry.display_name} has more than {max_moves} moves.")
    if entry.level and entry.level > max_level:
        problems.append(f"{entry.display_name} is higher than level {max_level}.")
    return problems

def middle_evolution(ctx: HookContext):
    species = _species(ctx, ctx.entry)
    if species is None:
        return []
    if not species.get("evos") or not species.get("prevo"):
        return [f"{ctx.entry.species} is not the middle Pokemon in an evolution chain."]
    return []

def requires_type_or_ability(ctx: HookContext, type: str, ability: str):
    species = _species(ctx, ctx.entry)
    if species is None:
        return []
    if type.lower() not in _types(species) and to_id(ctx.entry.ability) != to_id(ability):
        return [f"{ctx.entry.species} is not a {type} type and does not have the ability {ability}."]
    return []

def little_cup(ctx: HookContext):
    species = _species(ctx, ctx.entry)
    if species is None:
        return []
    if species.get("prevo") or not species.get("evos"):
        return [f"{species.name} isn't the first stage of an evolution line (Little Cup)."]
    return []

def legal_ability(ctx: HookContext):
    if ctx.ruleset is not None and ctx.ruleset.has_rule("Ignore Illegal Abilities"):
        return []
    species = _species(ctx, ctx.entry)
    if species is None or not ctx.entry.ability:
        return []
    natural = {to_id(a) for a in (species.get("abilities", {}) or {}).values()}
    if natural and to_id(ctx.entry.ability) not in natural:
        return [f"{species.name} can't have {ctx.entry.ability}."]
    return []

# ---------------------------------------------------------------------------
# React
# ---------------------------------------------------------------------------

def truncate_team(ctx: HookContext, size: int):
    if ctx.battle is None:
        return None
    logger.debug("TeamTruncated", size=size)
    ctx.battle.truncate(size)

def announce(ctx: HookContext, message: str):
    ctx.add(message)

def forfeit_on_faint(ctx: HookContext):
    fainted = ctx.target
    if ctx.battle is None or fainted is None:
        return None
    winner = "p2" if fainted.side == "p1" else "p1"
    ctx.battle.win(winner)
    return STOP

def sleep_clause(ctx: HookContext):
    if ctx.data.get("status") != "slp" or ctx.battle is None or ctx.target is None:
        return None
    for ally in ctx.battle.side(ctx.target.side):
        if ally is not ctx.target and ally.status == "slp" and not ally.fainted:
            ctx.data["blocked"] = True
            ctx.add("Sleep Clause Mod activated.")
            return STOP
    return None

def heal_fraction(ctx: HookContext, fraction: float = 0.5):
    holder = ctx.holder or ctx.source
    if holder is None:
        return None
    healed = holder.heal(holder.max_hp * fraction)
    if healed:
        ctx.add(f"{holder.name} restored {healed} HP.")

def confuse_if_nature_minus(ctx: HookContext, stat: str):
    holder = ctx.holder or ctx.source
    if holder is None or formulas.nature_minus(holder.set.nature) != stat:
        return None
    confusion = ctx.entities.find(EntityKind.CONDITION, "confusion") if ctx.entities is not None else None
    if confusion is not None and holder.add_volatile(confusion):
        ctx.add(f"{holder.name} became confused!")

def boost_on_hit(ctx: HookContext, stat: str, stages: int, message: str = ""):
    target = ctx.target
    if target is None or target.fainted:
        return None
    if message:
        ctx.add(message)
    target.boost(stat, stages)

def boost_foe(ctx: HookContext, stat: str, stages: int):
    holder = ctx.holder or ctx.source
    foe = ctx.target
    # fires for the participant entering or attacking, not its foe
    if holder is not ctx.source or foe is None or foe is holder:
        return None
    foe.boost(stat, stages)
    ctx.add(f"{holder.name} affected {foe.name}'s {stat}.")

def add_volatile(ctx: HookContext, condition: str, who: str = "target"):
    participant = ctx.target if who == "target" else ctx.source
    found = ctx.entities.find(EntityKind.CONDITION, condition) if ctx.entities is not None else None
    if participant is not None and found is not None and participant.add_volatile(found):
        ctx.add(f"{participant.name} is affected by {found.name}.")

def confusion_self_hit(ctx: HookContext, chance: float = 1/3, fraction: float = 0.125):
    holder = ctx.holder
    if holder is None or holder is not ctx.source or ctx.battle is None:
        return None
    if ctx.battle.rng.random() < chance:
        holder.damage(max(1, int(holder.max_hp * fraction)))
        ctx.add(f"{holder.name} hurt itself in its confusion!")
        return STOP
    return None

def residual_heal(ctx: HookContext, fraction: float = 1/16):
    holder = ctx.holder
    if holder is None or holder.fainted:
        return None
    holder.heal(max(1, int(holder.max_hp * fraction)))

# ---------------------------------------------------------------------------
# Mutate
# ---------------------------------------------------------------------------

def _move_matches(ctx: HookContext, when_type: Optional[str], when_id: Optional[str]) -> bool:
    move = ctx.move
    if move is None:
        return False
    if when_type and move.type != when_type.lower():
        return False
    if when_id and move.id != to_id(when_id):
        return False
    return True

def set_move_field(ctx: HookContext, field: str, value: Any, when_type: Optional[str] = None, when_id: Optional[str] = None):
    if _move_matches(ctx, when_type, when_id):
        ctx.move.set(field, value)

def scale_move_field(ctx: HookContext, field: str, factor: float, when_type: Optional[str] = None, when_id: Optional[str] = None):
    if _move_matches(ctx, when_type, when_id):
        ctx.move.set(field, int(ctx.move.get(field, 0) * factor))

def retype_move(ctx: HookContext, from_type: str, to_type: str, chance: float = 1.0, message: str = ""):
    if not _move_matches(ctx, from_type, None):
        return None
    if chance < 1.0 and (ctx.battle is None or ctx.battle.rng.random() >= chance):
        return None
    ctx.move.type = to_type.lower()
    if message:
        ctx.add(message)

def attach_hit_boost(ctx: HookContext, type: str, stat: str, stages: int, message: str = ""):
    if not _move_matches(ctx, type, None):
        return None
    fn = partial(boost_on_hit, stat=stat, stages=stages, message=message)
    ctx.move.attach(EffectHandler("onHit", fn, name="boost_on_hit", owner=f"move:{ctx.move.id}"))

def scale_damage(ctx: HookContext, factor: float, when_type: Optional[str] = None):
    if "damage" not in ctx.data or (ctx.holder is not None and ctx.holder is not ctx.source):
        return None
    if when_type and (ctx.move is None or ctx.move.type != when_type.lower()):
        return None
    ctx.data["damage"] = int(ctx.data["damage"] * factor)

def scale_stat(ctx: HookContext, stat: str, factor: float):
    stats = ctx.data.get("stats")
    if stats is not None and stat in stats:
        stats[stat] = int(stats[stat] * factor)

def negate_immunity(ctx: HookContext):
    ctx.data["negate_immunity"] = True

# ---------------------------------------------------------------------------
# Override
# ---------------------------------------------------------------------------

def inverse_effectiveness(ctx: HookContext):
    move_type = ctx.data.get("move_type") or (ctx.move.type if ctx.move is not None else "")
    chart = ctx.dispatcher.formula("effectiveness") if ctx.dispatcher is not None else formulas.effectiveness
    negated = getattr(ctx.target, "negate_immunity", False)
    mult = 1.0
    for t in ctx.data.get("types", ()):
        base = chart(move_type, [t])
        if ctx.move is not None and ctx.move.id == "freezedry" and t.lower() == "water":
            mult *= base
        elif base == 0:
            mult *= 2.0 if negated else 0.0
        else:
            mult *= 1.0 / base
    return mult

def type_immunity(ctx: HookContext, type: str):
    if ctx.holder is None or ctx.holder is not ctx.target:
        return None
    move_type = ctx.data.get("move_type") or (ctx.move.type if ctx.move is not None else "")
    if move_type == type.lower():
        return 0.0
    return None

def register_builtin():
    handlers = [
        (min_team_size, ("validateTeam",)), (max_team_size, ("validateTeam",)),
        (exact_level, ("validateTeam",)), (unique_initials, ("validateTeam",)),
        (team_bst_cap, ("validateTeam",)), (species_clause, ("validateTeam",)),
        (same_type_clause, ("validateTeam",)), (move_user_limit, ("validateTeam",)),
        (bst_cap, ("validateSet",)), (force_moves, ("validateSet",)), (force_level, ("validateSet",)),
        (restricted_abilities, ("validateSet",)), (item_bst_restriction, ("validateSet",)),
        (nonstandard_check, ("validateSet",)), (middle_evolution, ("validateSet",)),
        (requires_type_or_ability, ("validateSet",)), (little_cup, ("validateSet",)),
        (legal_ability, ("validateSet",)),
        (truncate_team, ("onBegin",)), (announce, ()), (forfeit_on_faint, ("onFaint",)),
        (sleep_clause, ("onSetStatus",)), (heal_fraction, ("onEat", "onHit", "onResidual")),
        (confuse_if_nature_minus, ("onEat",)), (boost_on_hit, ("onHit",)),
        (boost_foe, ("onSwitchIn", "onHit")), (add_volatile, ("onHit", "onSwitchIn")),
        (confusion_self_hit, ("onBeforeMove",)), (residual_heal, ("onResidual",)),
        (set_move_field, ("onModifyMove",)), (scale_move_field, ("onModifyMove",)),
        (retype_move, ("onModifyMove",)), (attach_hit_boost, ("onModifyMove",)),
        (scale_damage, ("onModifyDamage",)), (scale_stat, ("onModifyPokemon",)),
        (negate_immunity, ("onModifyPokemon",)),
        (inverse_effectiveness, ("onEffectiveness",)), (type_immunity, ("onImmunity",)),
    ]
    for fn, points in handlers:
        library.register(fn.__name__, fn, points)

register_builtin()
