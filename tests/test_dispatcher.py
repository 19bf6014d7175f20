import pytest

from arena.core.errors import UnknownLifecyclePoint
from arena.effects.dispatcher import HookDispatcher
from arena.effects.handlers import STOP, EffectHandler, HookContext
from arena.entities.types import Entity, EntityKind
from arena.mods.builtin import register_builtin
from arena.mods.variants import ModRegistry, ModVariant
from arena.battle.models import MoveUse, Participant, TeamSet
from tests.conftest import make_participant, ruleset_with, tagger


def _handler(point, fn, name="h", owner="format:test"):
    return EffectHandler(point, fn, name=name, owner=owner)


def _boom(ctx):
    raise RuntimeError("boom")


def test_veto_concatenates_problems_from_every_handler():
    rs = ruleset_with(validateTeam=(
        _handler("validateTeam", lambda ctx: ["first"]),
        _handler("validateTeam", lambda ctx: "second"),
        _handler("validateTeam", lambda ctx: []),
        _handler("validateTeam", lambda ctx: ["third", "fourth"]),
    ))
    result = HookDispatcher(rs).dispatch("validateTeam", team=[])
    assert result.problems == ["first", "second", "third", "fourth"]
    assert not result.ok


def test_unknown_point_is_rejected():
    with pytest.raises(UnknownLifecyclePoint):
        HookDispatcher(ruleset_with()).dispatch("onBogus")


def test_react_stop_ends_the_pass():
    seen = []
    rs = ruleset_with(onResidual=(
        _handler("onResidual", lambda ctx: seen.append("a")),
        _handler("onResidual", lambda ctx: STOP),
        _handler("onResidual", lambda ctx: seen.append("c")),
    ))
    result = HookDispatcher(rs).dispatch("onResidual")
    assert result.stopped
    assert seen == ["a"]


def test_raising_handler_is_recorded_and_skipped():
    seen = []
    rs = ruleset_with(onBegin=(
        _handler("onBegin", _boom, name="explode", owner="format:broken"),
        _handler("onBegin", lambda ctx: seen.append("after")),
    ))
    d = HookDispatcher(rs)
    result = d.dispatch("onBegin")
    assert seen == ["after"]
    assert len(result.faults) == 1
    fault = result.faults[0]
    assert fault.owner == "format:broken"
    assert fault.handler == "explode"
    assert "boom" in fault.error
    assert d.faults == result.faults


def test_mutate_fault_rolls_back_partial_changes():
    def half_then_fail(ctx):
        ctx.move.base_power = 50
        raise ValueError("half")

    def plus_ten(ctx):
        ctx.move.base_power += 10

    rs = ruleset_with(onModifyMove=(
        _handler("onModifyMove", half_then_fail, name="half"),
        _handler("onModifyMove", plus_ten, name="plus"),
    ))
    move = MoveUse("tackle", "Tackle", base_power=100)
    result = HookDispatcher(rs).dispatch("onModifyMove", HookContext("onModifyMove", move=move))
    assert move.base_power == 110
    assert [f.handler for f in result.faults] == ["half"]


def test_mutations_are_seen_by_later_handlers():
    rs = ruleset_with(onModifyDamage=(
        _handler("onModifyDamage", lambda ctx: ctx.data.update(damage=ctx.data["damage"] * 2)),
        _handler("onModifyDamage", lambda ctx: ctx.data.update(damage=ctx.data["damage"] + 1)),
    ))
    ctx = HookContext("onModifyDamage", data={"damage": 10})
    HookDispatcher(rs).dispatch("onModifyDamage", ctx)
    assert ctx.data["damage"] == 21


def test_collection_order_and_holders():
    seen = []
    point = "onModifyMove"
    rs = ruleset_with(onModifyMove=(tagger("format", seen, owner="format:test"),))
    variant = ModVariant("testmod", hooks={point: (tagger("mod", seen, owner="mod:testmod"),)})
    ability = Entity(EntityKind.ABILITY, "a", "A", handlers={point: tagger("ability", seen)})
    item = Entity(EntityKind.ITEM, "i", "I", handlers={point: tagger("item", seen)})
    move_entity = Entity(EntityKind.MOVE, "m", "M", handlers={point: tagger("move", seen)})
    user = Participant("p1", TeamSet("Test"), None, 100, {"hp": 100}, ability=ability, item=item)

    HookDispatcher(rs, variant=variant).dispatch(point, HookContext(point, source=user, move=MoveUse.from_entity(move_entity)))
    assert [tag for tag, _ in seen] == ["format", "mod", "ability", "item", "move"]
    assert [holder for _, holder in seen] == [None, None, user, user, user]


def test_consumed_item_contributes_nothing():
    seen = []
    item = Entity(EntityKind.ITEM, "i", "I", handlers={"onResidual": tagger("item", seen, point="onResidual")})
    user = Participant("p1", TeamSet("Test"), None, 100, {"hp": 100}, item=item, item_consumed=True)
    HookDispatcher(ruleset_with()).dispatch("onResidual", HookContext("onResidual", source=user))
    assert seen == []


def test_override_first_number_wins_and_none_falls_through():
    rs = ruleset_with(onEffectiveness=(
        _handler("onEffectiveness", lambda ctx: None),
        _handler("onEffectiveness", lambda ctx: 0.25),
        _handler("onEffectiveness", lambda ctx: 8.0),
    ))
    ctx = HookContext("onEffectiveness", data={"move_type": "fire", "types": ("grass",)})
    assert HookDispatcher(rs).dispatch("onEffectiveness", ctx).value == 0.25


def test_ability_immunity_overrides_the_chart(registry):
    d = HookDispatcher(ruleset_with(), registry)
    attacker = make_participant(registry, "Garchomp")
    levitating = make_participant(registry, "Bronzong", side="p2", ability="Levitate")
    grounded = make_participant(registry, "Bronzong", side="p2", ability="Heatproof")
    quake = MoveUse.from_entity(registry.get(EntityKind.MOVE, "Earthquake"))
    assert d.effectiveness(quake, attacker, levitating) == 0.0
    assert d.effectiveness(quake, attacker, grounded) == 2.0


def test_held_immunity_runs_before_format_chart_override(registry):
    rs = ruleset_with(onEffectiveness=(_handler("onEffectiveness", lambda ctx: 0.5),))
    d = HookDispatcher(rs, registry)
    attacker = make_participant(registry, "Garchomp")
    levitating = make_participant(registry, "Bronzong", side="p2", ability="Levitate")
    grounded = make_participant(registry, "Bronzong", side="p2", ability="Heatproof")
    quake = MoveUse.from_entity(registry.get(EntityKind.MOVE, "Earthquake"))
    assert d.effectiveness(quake, attacker, levitating) == 0.0
    assert d.effectiveness(quake, attacker, grounded) == 0.5


def test_negated_type_immunity_counts_as_neutral(registry):
    d = HookDispatcher(ruleset_with(), registry)
    quake = MoveUse.from_entity(registry.get(EntityKind.MOVE, "Earthquake"))
    user = make_participant(registry, "Garchomp")
    target = make_participant(registry, "Skarmory", side="p2")
    assert d.effectiveness(quake, user, target) == 0.0
    target.negate_immunity = True
    assert d.effectiveness(quake, user, target) == 2.0


def test_default_chart_multiplies_per_type(registry):
    d = HookDispatcher(ruleset_with(), registry)
    ice_beam = MoveUse.from_entity(registry.get(EntityKind.MOVE, "Ice Beam"))
    user = make_participant(registry, "Vaporeon")
    target = make_participant(registry, "Garchomp", side="p2")
    assert d.effectiveness(ice_beam, user, target) == 4.0


def test_variant_formula_replaces_the_default(registry):
    mods = register_builtin(ModRegistry())
    shadow_ball = MoveUse.from_entity(registry.get(EntityKind.MOVE, "Shadow Ball"))
    user = make_participant(registry, "Gengar")
    target = make_participant(registry, "Skarmory", side="p2")
    assert HookDispatcher(ruleset_with(), registry).effectiveness(shadow_ball, user, target) == 1.0
    assert HookDispatcher(ruleset_with(), registry, mods.get("gen5")).effectiveness(shadow_ball, user, target) == 0.5
