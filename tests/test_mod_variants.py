import pytest

from arena.core.errors import UnknownModVariant
from arena.entities.types import EntityKind
from arena.mods import formulas
from arena.mods.builtin import (averagemons_base_stats, cup350_base_stats, gen5_effectiveness,
                                register_builtin, statswitch_base_stats, tiershift_base_stats)
from arena.mods.variants import ModRegistry, ModVariant


@pytest.fixture
def mods():
    return register_builtin(ModRegistry())


def test_builtin_variants_are_registered(mods):
    assert mods.ids() == ["350cup", "averagemons", "gen5", "gen7", "statswitch", "tiershift"]
    assert "Gen 5" in mods
    assert mods.find("Stat Switch") is mods.get("statswitch")
    with pytest.raises(UnknownModVariant):
        mods.get("gen42")


def test_stat_switch_reverses_base_stats(registry):
    shedinja = registry.get(EntityKind.SPECIES, "Shedinja")
    assert statswitch_base_stats(shedinja) == {"hp": 40, "atk": 30, "def": 30, "spa": 45, "spd": 90, "spe": 1}


def test_averagemons_flattens_everything(registry):
    chansey = registry.get(EntityKind.SPECIES, "Chansey")
    assert set(averagemons_base_stats(chansey).values()) == {100}


def test_350_cup_doubles_only_low_totals(registry):
    pichu = registry.get(EntityKind.SPECIES, "Pichu")
    garchomp = registry.get(EntityKind.SPECIES, "Garchomp")
    assert cup350_base_stats(pichu)["spe"] == 120
    assert cup350_base_stats(garchomp) == formulas.base_stats(garchomp)


def test_tier_shift_boosts_by_tier_and_caps():
    pu = {"tier": "PU", "baseStats": {"hp": 50, "atk": 250, "def": 50, "spa": 50, "spd": 50, "spe": 50}}
    assert tiershift_base_stats(pu) == {"hp": 50, "atk": 255, "def": 70, "spa": 70, "spd": 70, "spe": 70}
    ou = {"tier": "OU", "baseStats": {"hp": 50, "atk": 50, "def": 50, "spa": 50, "spd": 50, "spe": 50}}
    assert tiershift_base_stats(ou) == formulas.base_stats(ou)
    lc_uber = {"tier": "LC Uber", "baseStats": {"hp": 10, "atk": 10, "def": 10, "spa": 10, "spd": 10, "spe": 10}}
    assert tiershift_base_stats(lc_uber)["spe"] == 30


def test_gen5_chart_has_no_fairy_and_older_steel():
    assert gen5_effectiveness("ghost", ["steel"]) == 0.5
    assert gen5_effectiveness("dark", ["steel"]) == 0.5
    assert gen5_effectiveness("dragon", ["fairy"]) == 1.0
    assert formulas.effectiveness("dragon", ["fairy"]) == 0.0
    assert formulas.effectiveness("ghost", ["steel"]) == 1.0


def test_view_applies_overlays_without_touching_the_registry(engine):
    mods, registry = engine.mods, engine.registry
    view = mods.view("gen7", registry)
    assert mods.view("gen7", registry) is view
    figy = view.get(EntityKind.ITEM, "Figy Berry")
    assert figy.get("desc").startswith("Restores 1/2")
    assert registry.get(EntityKind.ITEM, "Figy Berry").get("desc").startswith("Restores 1/3")
    assert view.get(EntityKind.ITEM, "Garchompite").nonstandard is None
    assert registry.get(EntityKind.ITEM, "Garchompite").nonstandard == "Past"
    # variants without overlays see the base records
    assert mods.view("gen5", registry).find(EntityKind.ITEM, "Figy Berry") is registry.find(EntityKind.ITEM, "Figy Berry")


def test_registering_again_drops_cached_views(registry):
    mods = ModRegistry([ModVariant("mine")])
    first = mods.view("mine", registry)
    mods.register(ModVariant("mine"))
    assert mods.view("mine", registry) is not first


def test_engine_resolve_with_mod(engine):
    rs = engine.resolve("OU", mod="Stat Switch")
    assert rs.mod == "statswitch"
    assert rs.banlist == engine.resolve("OU").banlist
    assert engine.resolve("OU").mod == ""
    assert engine.resolve("Stat Switch").mod == "statswitch"
    with pytest.raises(UnknownModVariant):
        engine.resolve("OU", mod="nomod")
