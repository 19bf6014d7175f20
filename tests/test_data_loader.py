from arena.core.paths import ASSETS
from arena.data import loader
from arena.entities.types import EntityKind
from arena.formats.types import Format


def test_entity_tables_load(registry):
    assert len(registry.all(EntityKind.SPECIES)) == 29
    assert registry.find(EntityKind.CONDITION, "confusion").handler("onBeforeMove") is not None
    assert registry.get(EntityKind.ITEM, "Leftovers").handler("onResidual").owner == "item:leftovers"
    assert registry.get(EntityKind.ABILITY, "Mountaineer").nonstandard == "CAP"


def test_fragments_and_formats_are_told_apart():
    fragments = [loader.record_to_fragment(raw, is_format=(source != loader.FRAGMENTS_FILE))
                 for source, raw in loader.load_format_records(ASSETS)]
    by_name = {f.name: f for f in fragments}
    assert not by_name["Standard"].is_format
    assert not isinstance(by_name["Species Clause"], Format)
    assert by_name["OU"].is_format
    # rulesets.json is read first
    assert fragments[0].name == "Pokemon"


def test_record_keys_map_onto_format_fields(engine):
    lc = engine.resolver.get("LC")
    assert lc.max_level == 5
    assert lc.section == "XY Singles"
    bss = engine.resolver.get("Battle Spot Singles")
    assert bss.max_forced_level == 50
    assert [ref.name for ref in bss.hooks["onBegin"]] == ["truncate_team"]
    assert bss.hooks["onBegin"][0].args == {"size": 3}
    hidden = engine.resolver.get("Unrated Random Battle")
    assert hidden.challenge_show is False and hidden.rated is False
    assert engine.resolver.get("Smogon Doubles").game_type == "doubles"


def test_misspelled_banlist_key_is_ignored_by_the_loader(engine):
    banlist = engine.resolve("[Gen 5] Point Score").banlist
    assert "Soul Dew" not in banlist
    assert "Arceus" not in banlist
    assert "Sand Veil" in banlist


def test_every_shipped_format_resolves(engine):
    for fmt in engine.resolver.formats():
        rs = engine.resolve(fmt.name)
        assert rs.chain[-1] == fmt.name


def test_duplicate_format_keeps_first_definition(engine):
    lc_uu = engine.resolve("LC UU")
    assert "Omanyte" in lc_uu.banlist
    assert lc_uu.format.section == "Other Metagames"


def test_mod_overlays_load():
    overlays = loader.load_mod_overlays(ASSETS)
    assert set(overlays) == {"gen7"}
    items = overlays["gen7"][EntityKind.ITEM]
    assert items["figyberry"].inherit
    assert items["garchompite"].fields == {"nonstandard": None}


def test_sections_group_formats(engine):
    sections = engine.sections()
    assert "OU" in [f.name for f in sections["XY Singles"]]
    assert "[Gen 5] OU" in [f.name for f in sections["BW2 Singles"]]
    assert "Monotype" in [f.name for f in sections["Monotype"]]
