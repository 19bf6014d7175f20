"""Entity registry: immutable base records plus pure overlay resolution."""
from __future__ import annotations
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from arena.core.errors import DuplicateEntity, UnknownBaseEntity
from arena.core.ids import to_id
from arena.core.logging import logger
from arena.effects.handlers import EffectHandler, compose
from arena.effects.library import EXTEND, HandlerLibrary, library as default_library, parse_refs
from arena.effects.points import is_point
from .types import Entity, EntityKind, Overlay


def overlay_from_record(record: Mapping[str, Any]) -> Overlay:
    """Split a raw JSON record into fields and handler references."""
    fields: Dict[str, Any] = {}
    handlers: Dict[str, tuple] = {}
    for key, value in record.items():
        if key == "inherit":
            continue
        if is_point(key):
            handlers[key] = tuple(parse_refs(value))
        elif key == "isNonstandard":
            fields["nonstandard"] = value
        else:
            fields[key] = value
    return Overlay(inherit=bool(record.get("inherit", False)), fields=fields, handlers=handlers)

class EntityRegistry:
    def __init__(self, handlers: Optional[HandlerLibrary] = None):
        self.library = handlers or default_library
        self._records: Dict[EntityKind, Dict[str, Entity]] = {k: {} for k in EntityKind}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def register(self, entity: Entity):
        table = self._records[entity.kind]
        if entity.id in table:
            raise DuplicateEntity(entity.kind.value, entity.id)
        table[entity.id] = entity

    def register_record(self, kind: EntityKind, entity_id: str, record: Mapping[str, Any]) -> Entity:
        entity = self.resolve_overlay(kind, entity_id, overlay_from_record(record))
        self.register(entity)
        return entity

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def find(self, kind: EntityKind, name: str) -> Optional[Entity]:
        return self._records[kind].get(to_id(name))

    def get(self, kind: EntityKind, name: str) -> Entity:
        found = self.find(kind, name)
        if found is None:
            raise KeyError(f"{kind.value} not found: {name}")
        return found

    def all(self, kind: EntityKind) -> List[Entity]:
        return list(self._records[kind].values())

    def __len__(self) -> int:
        return sum(len(t) for t in self._records.values())

    # ------------------------------------------------------------------
    # Overlay resolution (pure)
    # ------------------------------------------------------------------
    def resolve_overlay(self, kind: EntityKind, entity_id: str, overlay: Overlay) -> Entity:
        eid = to_id(entity_id)
        owner = f"{kind.value}:{eid}"
        if overlay.inherit:
            base = self.find(kind, eid)
            if base is None:
                raise UnknownBaseEntity(kind.value, eid)
            name = base.name
            nonstandard = base.nonstandard
            attrs: Dict[str, Any] = dict(base.attributes)
            handlers: Dict[str, EffectHandler] = dict(base.handlers)
        else:
            name, nonstandard, attrs, handlers = entity_id, None, {}, {}

        for key, value in overlay.fields.items():
            if key == "name":
                name = value
            elif key == "nonstandard":
                nonstandard = value
            else:
                attrs[key] = value

        for point, refs in overlay.handlers.items():
            if not refs:
                handlers.pop(point, None)
                continue
            built = self.library.build_chain(point, list(refs), owner)
            if built is None:
                continue
            if point in handlers and any(r.mode == EXTEND for r in refs):
                handlers[point] = compose(handlers[point], built)
            else:
                handlers[point] = built

        return Entity(kind, eid, name, attrs, handlers, nonstandard)

    def resolve_overlays(self, kind: EntityKind, overlays: Mapping[str, Overlay]) -> Dict[str, Entity]:
        resolved = {to_id(k): self.resolve_overlay(kind, k, o) for k, o in overlays.items()}
        logger.debug("OverlaysResolved", kind=kind.value, count=len(resolved))
        return resolved

class EntityView:
    """Read-through lookup where mod-scoped records shadow the shared registry."""
    def __init__(self, registry: EntityRegistry, overrides: Optional[Mapping[EntityKind, Mapping[str, Entity]]] = None):
        self.registry = registry
        self.overrides: Dict[EntityKind, Dict[str, Entity]] = {k: dict(v) for k, v in (overrides or {}).items()}

    def find(self, kind: EntityKind, name: str) -> Optional[Entity]:
        eid = to_id(name)
        hit = self.overrides.get(kind, {}).get(eid)
        return hit if hit is not None else self.registry.find(kind, eid)

    def get(self, kind: EntityKind, name: str) -> Entity:
        found = self.find(kind, name)
        if found is None:
            raise KeyError(f"{kind.value} not found: {name}")
        return found

    def all(self, kind: EntityKind) -> List[Entity]:
        merged = {e.id: e for e in self.registry.all(kind)}
        merged.update(self.overrides.get(kind, {}))
        return list(merged.values())

__all__ = ["EntityRegistry","EntityView","overlay_from_record"]
