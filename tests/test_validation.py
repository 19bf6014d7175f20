def chomp(**kw):
    entry = {"species": "Garchomp", "ability": "Rough Skin", "item": "Leftovers",
             "moves": ["Earthquake", "Dragon Claw", "Stone Edge", "Swords Dance"]}
    entry.update(kw)
    return entry


def scizor(**kw):
    entry = {"species": "Scizor", "ability": "Technician", "item": "Choice Band",
             "moves": ["Bullet Punch", "U-turn", "Swords Dance"]}
    entry.update(kw)
    return entry


def azumarill(**kw):
    entry = {"species": "Azumarill", "ability": "Huge Power", "item": "Sitrus Berry",
             "moves": ["Play Rough", "Aqua Jet", "Waterfall"]}
    entry.update(kw)
    return entry


def mon(species, ability, *moves, **kw):
    entry = {"species": species, "ability": ability, "moves": list(moves or ["Tackle"])}
    entry.update(kw)
    return entry


# ---------------------------------------------------------------------------
# Banlists
# ---------------------------------------------------------------------------

def test_legal_ou_team_is_accepted(engine):
    assert engine.validate_team("OU", [chomp(), scizor(), azumarill()]) == []


def test_tier_tag_ban(engine):
    problems = engine.validate_team("OU", [chomp(), mon("Mewtwo", "Pressure", "Psychic")])
    assert problems == ["Mewtwo uses something in Uber, which is banned."]


def test_unreleased_tag_ban(engine):
    problems = engine.validate_team("OU", [mon("Volcanion", "Water Absorb", "Surf")])
    assert problems == ["Volcanion uses something in Unreleased, which is banned."]


def test_item_ban(engine):
    problems = engine.validate_team("OU", [chomp(item="Soul Dew")])
    assert problems == ["Soul Dew is banned."]


def test_past_items_need_a_variant_that_repermits_them(engine):
    assert engine.validate_team("OU", [chomp(item="Garchompite")]) == ["Garchompite is not available (Past)."]
    assert engine.validate_team("[Gen 7] OU", [chomp(item="Garchompite")]) == []
    assert engine.validate_team("[Gen 7] OU", [mon("Gengar", "Cursed Body", "Shadow Ball", item="Gengarite")]) == [
        "Gengarite is banned."]


def test_single_set_combo_ban(engine):
    problems = engine.validate_team("Almost Any Ability", [mon("Shedinja", "Sturdy", "U-turn")])
    assert problems == ["Shedinja has the combination of Shedinja + Sturdy, which is banned."]


def test_illegal_abilities_ignored_but_restricted_list_applies(engine):
    assert engine.validate_team("Almost Any Ability", [chomp(ability="Levitate")]) == []
    problems = engine.validate_team("Almost Any Ability", [chomp(ability="Huge Power")])
    assert problems == ["The ability Huge Power is banned on Pokemon that do not naturally have it."]
    assert engine.validate_team("Almost Any Ability", [azumarill()]) == []


def test_team_combo_ban(engine):
    team = [mon("Politoed", "Drizzle", "Surf"), mon("Kingdra", "Swift Swim", "Surf")]
    problems = engine.validate_team("[Gen 5] OU", team)
    assert problems == ["Your team has the combination of Drizzle ++ Swift Swim, which is banned."]
    assert engine.validate_team("[Gen 5] OU", team[:1]) == []


def test_allow_repermits_nonstandard_entries(engine):
    syclant = mon("Syclant", "Compound Eyes", "Ice Beam")
    assert engine.validate_team("OU", [syclant]) == ["Syclant is not available (CAP)."]
    assert engine.validate_team("CAP", [syclant]) == []


# ---------------------------------------------------------------------------
# Structural checks
# ---------------------------------------------------------------------------

def test_structural_problems(engine):
    assert engine.validate_team("OU", [chomp(moves=[])]) == ["Garchomp has no moves."]
    assert engine.validate_team("OU", [chomp(moves=["Earthquake", "Earthquake"])]) == [
        "Garchomp has Earthquake more than once."]
    five = ["Earthquake", "Dragon Claw", "Stone Edge", "Swords Dance", "Outrage"]
    assert engine.validate_team("OU", [chomp(moves=five)]) == ["Garchomp has more than 4 moves."]
    assert engine.validate_team("OU", [chomp(level=101)]) == ["Garchomp is higher than level 100."]
    assert engine.validate_team("OU", [chomp(level=0, name="Chompy")]) == ["Chompy is lower than level 1."]


def test_unknown_and_blank_entries(engine):
    assert engine.validate_team("OU", [mon("Missingno", "", "Tackle")]) == ["Missingno is not a recognized Pokemon."]
    assert engine.validate_team("OU", [chomp(item="Mystery Orb")]) == ["Mystery Orb is not a recognized item."]
    assert engine.validate_team("OU", [{"species": "", "moves": ["Tackle"]}]) == ["A team member has no species."]


def test_team_size_limits(engine):
    team = [chomp(), scizor(), azumarill(), mon("Skarmory", "Sturdy", "Brave Bird"),
            mon("Tyranitar", "Sand Stream", "Crunch"), mon("Gyarados", "Intimidate", "Waterfall"),
            mon("Salamence", "Intimidate", "Outrage")]
    assert "You may only bring up to 6 Pokemon." in engine.validate_team("OU", team)
    assert engine.validate_team("OU", []) == ["You must bring at least 1 Pokemon."]


def test_oversized_team_with_banned_species_reports_both(engine):
    team = [chomp(), scizor(), azumarill(), mon("Skarmory", "Sturdy", "Brave Bird"),
            mon("Tyranitar", "Sand Stream", "Crunch"), mon("Gyarados", "Intimidate", "Waterfall"),
            mon("Mewtwo", "Pressure", "Psychic")]
    problems = engine.validate_team("OU", team)
    assert len(problems) == 2
    assert problems == ["You may only bring up to 6 Pokemon.",
                        "Mewtwo uses something in Uber, which is banned."]


def test_validate_set_runs_set_checks_only(engine):
    assert engine.validate_set("OU", chomp(ability="Intimidate")) == ["Garchomp can't have Intimidate."]
    assert engine.validate_set("OU", chomp()) == []


# ---------------------------------------------------------------------------
# Format rule hooks
# ---------------------------------------------------------------------------

def test_species_clause(engine):
    problems = engine.validate_team("OU", [chomp(), chomp()])
    assert problems == ["You are limited to one of each Pokemon by Species Clause (you have more than one Garchomp)."]


def test_baton_pass_clause(engine):
    team = [chomp(moves=["Earthquake", "Baton Pass"]), scizor(moves=["Bullet Punch", "Baton Pass"])]
    assert engine.validate_team("OU", team) == ["Only 1 Pokemon may know Baton Pass by Baton Pass Clause."]


def test_metronome_normalizes_and_checks(engine):
    sets, problems = engine.check_team("Metronome", [mon("Raichu", "", "Thunderbolt", level=100)])
    assert problems == []
    assert sets[0].moves == ["Metronome"]

    problems = engine.validate_team("Metronome", [
        mon("Mewtwo", "", "Psychic", level=100),
        mon("Raichu", "", "Thunderbolt", level=50),
    ])
    assert problems == [
        "You are limited to Pokemon with a BST of 600 or lower by BST Clause.",
        "You may only bring one Pokemon.",
        "Raichu is lower than level 100.",
    ]


def test_battle_spot_forces_level_and_minimum_size(engine):
    sets, problems = engine.check_team("Battle Spot Singles", [chomp(), scizor(), azumarill()])
    assert problems == []
    assert [s.forced_level for s in sets] == [50, 50, 50]
    assert sets[0].level == 100

    problems = engine.validate_team("Battle Spot Singles", [chomp(), scizor()])
    assert problems == ["You must bring at least three Pokemon."]


def test_little_cup(engine):
    assert engine.validate_team("LC", [mon("Gible", "Sand Veil", "Earthquake", level=5)]) == []
    assert engine.validate_team("LC", [mon("Gible", "Sand Veil", "Earthquake")]) == ["Gible is higher than level 5."]
    assert engine.validate_team("LC", [mon("Gabite", "Sand Veil", "Earthquake", level=5)]) == [
        "Gabite isn't the first stage of an evolution line (Little Cup)."]
    assert engine.validate_team("LC", [mon("Scyther", "Technician", "U-turn", level=5)]) == [
        "Scyther uses something in LC Uber, which is banned."]


def test_middle_cup(engine):
    sets, problems = engine.check_team("Middle Cup", [mon("Pikachu", "Static", "Thunderbolt")])
    assert problems == []
    assert sets[0].level == 50
    assert engine.validate_team("Middle Cup", [mon("Raichu", "Static", "Thunderbolt")]) == [
        "Raichu is not the middle Pokemon in an evolution chain."]


def test_sky_battle(engine):
    assert engine.validate_team("Sky Battle", [mon("Skarmory", "Sturdy", "Brave Bird"),
                                               mon("Bronzong", "Levitate", "Psychic")]) == []
    assert engine.validate_team("Sky Battle", [chomp()]) == [
        "Garchomp is not a Flying type and does not have the ability Levitate."]


def test_alphabet_cup(engine):
    problems = engine.validate_team("Alphabet Cup", [scizor(), mon("Skarmory", "Sturdy", "Brave Bird")])
    assert problems == ['Your team cannot have more than one Pokemon starting with the letter "S".']


def test_350_cup_eviolite_uses_unmodded_stats(engine):
    problems = engine.validate_team("350 Cup", [mon("Pichu", "Static", "Thunderbolt", item="Eviolite")])
    assert problems == ["Eviolite is banned on Pokemon with 350 or lower BST."]
    assert engine.validate_team("350 Cup", [mon("Chansey", "Natural Cure", "Recover", item="Eviolite")]) == []


def test_monotype(engine):
    assert engine.validate_team("Monotype", [chomp(), mon("Gible", "Sand Veil", "Earthquake")]) == []
    problems = engine.validate_team("Monotype", [chomp(), mon("Vaporeon", "Water Absorb", "Surf")])
    assert problems == ["Your team must share a type by Same Type Clause."]


def test_classic_hackmons_reports_nonstandard_entities(engine):
    problems = engine.validate_team("Classic Hackmons", [mon("Syclant", "Mountaineer", "Paleo Wave")])
    for expected in ("Syclant is not a real Pokemon.", "Mountaineer is not a real ability.",
                     "Paleo Wave is not a real move."):
        assert expected in problems
