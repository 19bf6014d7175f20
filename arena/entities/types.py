from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from arena.effects.handlers import EffectHandler
from arena.effects.library import HandlerRef

class EntityKind(str, Enum):
    SPECIES = "species"
    ITEM = "item"
    ABILITY = "ability"
    MOVE = "move"
    CONDITION = "condition"

def freeze(value: Any) -> Any:
    """Deep read-only copy: dicts become mapping proxies, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value

@dataclass(frozen=True)
class Entity:
    kind: EntityKind
    id: str
    name: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    handlers: Mapping[str, EffectHandler] = field(default_factory=dict)
    nonstandard: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "attributes", freeze(self.attributes))
        object.__setattr__(self, "handlers", MappingProxyType(dict(self.handlers)))

    @property
    def label(self) -> str:
        return f"{self.kind.value}:{self.id}"

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def handler(self, point: str) -> Optional[EffectHandler]:
        return self.handlers.get(point)

@dataclass(frozen=True)
class Overlay:
    """Field and handler replacements applied on top of a base record.

    `handlers` maps a point to its references; an empty tuple removes the
    base handler for that point.
    """
    inherit: bool = False
    fields: Mapping[str, Any] = field(default_factory=dict)
    handlers: Mapping[str, Tuple[HandlerRef, ...]] = field(default_factory=dict)

__all__ = ["EntityKind","Entity","Overlay","freeze"]
