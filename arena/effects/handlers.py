"""Handler contract: the callable shape every lifecycle point expects.

A handler takes one HookContext and returns a point-specific value:
problem strings (veto), nothing (mutate), nothing or STOP (react), or a
number (override).
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

class _Stop:
    def __repr__(self) -> str:
        return "STOP"

STOP = _Stop()

@dataclass
class HookContext:
    point: str
    battle: Any = None
    source: Any = None
    target: Any = None
    move: Any = None
    team: Optional[List[Any]] = None
    entry: Any = None
    ruleset: Any = None
    entities: Any = None
    dispatcher: Any = None
    # Participant owning the entity whose handler is running; None for format/mod hooks
    holder: Any = None
    data: Dict[str, Any] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)

    def add(self, message: str):
        self.messages.append(message)
        if self.battle is not None:
            self.battle.add(message)

    def participants(self) -> list:
        seen: list = []
        for p in (self.source, self.target):
            if p is not None and all(p is not q for q in seen):
                seen.append(p)
        return seen

@dataclass(frozen=True)
class EffectHandler:
    point: str
    fn: Callable[[HookContext], Any]
    name: str = ""
    owner: str = ""

    def __call__(self, ctx: HookContext) -> Any:
        return self.fn(ctx)

    def owned_by(self, owner: str) -> "EffectHandler":
        return replace(self, owner=owner)

def compose(first: EffectHandler, then: EffectHandler) -> EffectHandler:
    """Call `first`, then `then`. A STOP from `first` skips `then`; problem lists concatenate."""
    def run(ctx: HookContext) -> Any:
        result = first(ctx)
        if result is STOP:
            return STOP
        extra = then(ctx)
        if isinstance(result, list) and isinstance(extra, list):
            return result + extra
        return result if extra is None else extra
    return EffectHandler(first.point, run, name=f"{first.name}+{then.name}", owner=then.owner or first.owner)

__all__ = ["STOP","HookContext","EffectHandler","compose"]
