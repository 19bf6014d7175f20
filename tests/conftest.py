import random
import pytest

from arena.battle.models import Participant, TeamSet
from arena.core.paths import ASSETS
from arena.data import loader
from arena.effects import builtin  # noqa: F401  registers the handler library
from arena.effects.handlers import EffectHandler
from arena.effects.library import HandlerLibrary
from arena.entities.registry import EntityRegistry
from arena.entities.types import EntityKind
from arena.formats.resolver import FormatResolver
from arena.formats.types import Format, ResolvedRuleSet
from arena.mods import formulas
from arena.system.engine import RulesEngine


class FixedRng:
    """Stand-in for random.Random that always rolls the same value."""
    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def make_registry(records=None, library: HandlerLibrary = None) -> EntityRegistry:
    reg = EntityRegistry(library)
    for kind, table in (records or {}).items():
        for eid, rec in table.items():
            reg.register_record(kind, eid, rec)
    return reg


def make_resolver(records, entities=None, library=None, mods=None) -> FormatResolver:
    return FormatResolver([loader.record_to_fragment(r) for r in records],
                          entities=entities, handlers=library, mods=mods)


def ruleset_with(name: str = "Test", **hooks) -> ResolvedRuleSet:
    """Resolved rule set carrying the given per-point handler tuples."""
    return ResolvedRuleSet(format=Format(name=name), chain=(name,), banlist=frozenset(), hooks=hooks)


def tagger(tag: str, seen: list, point: str = "onModifyMove", owner: str = "") -> EffectHandler:
    def fn(ctx):
        seen.append((tag, ctx.holder))
    return EffectHandler(point, fn, name=tag, owner=owner)


def make_participant(registry, species: str, side: str = "p1", ability: str = "", item: str = "",
                     level: int = 100, nature: str = "", moves=("Tackle",)) -> Participant:
    sp = registry.get(EntityKind.SPECIES, species)
    entry = TeamSet(species=sp.name, ability=ability, item=item, moves=list(moves), level=level, nature=nature)
    stats = {s: formulas.stat(s, v, level, nature) for s, v in formulas.base_stats(sp).items()}
    return Participant(side, entry, sp, level, stats,
                       types=tuple(str(t).lower() for t in sp.get("types", ())),
                       ability=registry.find(EntityKind.ABILITY, ability) if ability else None,
                       item=registry.find(EntityKind.ITEM, item) if item else None)


@pytest.fixture
def registry() -> EntityRegistry:
    return loader.load_entities(EntityRegistry(), ASSETS)


@pytest.fixture(scope="session")
def engine() -> RulesEngine:
    return RulesEngine(ASSETS).load()


@pytest.fixture
def rng():
    return random.Random(7)
