"""Hook dispatch.

The battle runtime calls `dispatch(point, ctx)` at each lifecycle juncture.
Handlers are gathered from the resolved format, the active mod variant and
every in-play entity, then run under the point's combination policy. A
handler that raises is recorded as a fault and skipped; the others still run.
"""
from __future__ import annotations
import copy
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from arena.core.logging import logger
from arena.mods import formulas
from .handlers import STOP, EffectHandler, HookContext
from .points import Policy, get_point

@dataclass
class HandlerFault:
    point: str
    owner: str
    handler: str
    error: str

    def __str__(self) -> str:
        return f"{self.point}: {self.owner or '-'} ({self.handler}) raised {self.error}"

@dataclass
class DispatchResult:
    point: str
    value: Any = None
    problems: List[str] = field(default_factory=list)
    faults: List[HandlerFault] = field(default_factory=list)
    stopped: bool = False

    @property
    def ok(self) -> bool:
        return not self.problems

# (handler, holder) pairs; holder is the participant whose entity contributed it
Collected = List[Tuple[EffectHandler, Any]]

def _snapshot(value: Any) -> Any:
    if value is None:
        return None
    if hasattr(value, "snapshot"):
        return value.snapshot()
    if isinstance(value, dict):
        return {k: (v.copy() if isinstance(v, (dict, list)) else v) for k, v in value.items()}
    if isinstance(value, list):
        return [v.copy() if hasattr(v, "copy") else copy.copy(v) for v in value]
    if hasattr(value, "copy"):
        return value.copy()
    return copy.copy(value)

def _restore(ctx: HookContext, name: str, saved: Any):
    value = getattr(ctx, name)
    if value is None or saved is None:
        setattr(ctx, name, saved)
    elif hasattr(value, "restore"):
        value.restore(saved)
    elif isinstance(value, dict):
        value.clear()
        value.update(saved)
    elif isinstance(value, list):
        value[:] = saved
    elif hasattr(value, "__dict__"):
        value.__dict__.update(saved.__dict__)
    else:
        setattr(ctx, name, saved)

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

class HookDispatcher:
    def __init__(self, ruleset: Any, entities: Any = None, variant: Any = None):
        self.ruleset = ruleset
        self.entities = entities
        self.variant = variant
        self.faults: List[HandlerFault] = []

    # ------------------------------------------------------------------
    # Formulas
    # ------------------------------------------------------------------
    def formula(self, name: str) -> Callable[..., Any]:
        if self.variant is not None:
            fn = self.variant.formula(name)
            if fn is not None:
                return fn
        return formulas.DEFAULTS[name]

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------
    def collect(self, point: str, ctx: HookContext) -> Collected:
        """Format hooks, then mod hooks, then abilities, items, volatiles, move."""
        out: Collected = [(h, None) for h in self.ruleset.hooks_for(point)]
        if self.variant is not None:
            out += [(h, None) for h in self.variant.hooks_for(point)]
        participants = ctx.participants()
        for p in participants:
            if p.ability is not None and p.ability.handler(point) is not None:
                out.append((p.ability.handler(point), p))
        for p in participants:
            item = p.active_item()
            if item is not None and item.handler(point) is not None:
                out.append((item.handler(point), p))
        for p in participants:
            for cond in list(p.volatiles):
                if cond.handler(point) is not None:
                    out.append((cond.handler(point), p))
        if ctx.move is not None:
            out += [(h, ctx.source) for h in ctx.move.handlers_for(point)]
        return out

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch(self, point: str, ctx: Optional[HookContext] = None, **kw: Any) -> DispatchResult:
        point_def = get_point(point)
        if ctx is None:
            ctx = HookContext(point, **kw)
        ctx.point = point
        ctx.dispatcher = self
        if ctx.ruleset is None:
            ctx.ruleset = self.ruleset
        if ctx.entities is None:
            ctx.entities = self.entities

        result = DispatchResult(point)
        for handler, holder in self.collect(point, ctx):
            saved = {name: _snapshot(getattr(ctx, name)) for name in point_def.mutable}
            ctx.holder = holder
            try:
                value = handler(ctx)
            except Exception as exc:
                for name, state in saved.items():
                    _restore(ctx, name, state)
                self._fault(result, handler, exc)
                continue
            finally:
                ctx.holder = None

            if point_def.policy == Policy.VETO:
                if isinstance(value, str):
                    result.problems.append(value)
                elif value:
                    result.problems.extend(str(v) for v in value)
            elif point_def.policy == Policy.REACT:
                if value is STOP:
                    result.stopped = True
                    break
            elif point_def.policy == Policy.OVERRIDE:
                if _is_number(value):
                    result.value = value
                    break
        if point_def.policy == Policy.OVERRIDE and result.value is None:
            result.value = self._override_default(point, ctx)
        return result

    def _fault(self, result: DispatchResult, handler: EffectHandler, exc: Exception):
        fault = HandlerFault(handler.point, handler.owner, handler.name, repr(exc))
        result.faults.append(fault)
        self.faults.append(fault)
        logger.warn("HandlerFault", point=fault.point, entity=fault.owner or "-", handler=fault.handler, error=fault.error)

    def _override_default(self, point: str, ctx: HookContext) -> Any:
        if point == "onEffectiveness":
            move_type = ctx.data.get("move_type") or (ctx.move.type if ctx.move is not None else "")
            chart = self.formula("effectiveness")
            if not getattr(ctx.target, "negate_immunity", False):
                return chart(move_type, ctx.data.get("types", ()))
            # negated type immunities count as neutral
            mult = 1.0
            for t in ctx.data.get("types", ()):
                mult *= chart(move_type, [t]) or 1.0
            return mult
        return None

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------
    def effectiveness(self, move: Any, source: Any, target: Any, battle: Any = None) -> float:
        """Held immunities first, then the format/mod chart override or the default chart."""
        data = {"move_type": move.type, "types": tuple(target.types)}
        immune = self.dispatch("onImmunity", HookContext("onImmunity", battle=battle, source=source, target=target,
                                                         move=move, data=dict(data)))
        if immune.value is not None:
            return float(immune.value)
        ctx = HookContext("onEffectiveness", battle=battle, source=source, target=target, move=move, data=data)
        return float(self.dispatch("onEffectiveness", ctx).value)

__all__ = ["HookDispatcher","DispatchResult","HandlerFault"]
