"""Mod variants and their registry.

A variant swaps baseline formulas, contributes format-independent hooks and
carries entity overlays. Overlays are resolved into a per-variant EntityView
on first use; the shared EntityRegistry is never written to.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from arena.core.errors import UnknownModVariant
from arena.core.ids import to_id
from arena.core.logging import logger
from arena.effects.handlers import EffectHandler
from arena.entities.registry import EntityRegistry, EntityView
from arena.entities.types import EntityKind, Overlay

@dataclass
class ModVariant:
    id: str
    name: str = ""
    desc: str = ""
    formulas: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    hooks: Dict[str, Tuple[EffectHandler, ...]] = field(default_factory=dict)
    overlays: Dict[EntityKind, Dict[str, Overlay]] = field(default_factory=dict)

    def __post_init__(self):
        self.id = to_id(self.id)
        self.name = self.name or self.id

    def formula(self, name: str) -> Optional[Callable[..., Any]]:
        return self.formulas.get(name)

    def hooks_for(self, point: str) -> Tuple[EffectHandler, ...]:
        return self.hooks.get(point, ())

    def add_overlays(self, kind: EntityKind, overlays: Mapping[str, Overlay]):
        self.overlays.setdefault(kind, {}).update({to_id(k): v for k, v in overlays.items()})

class ModRegistry:
    def __init__(self, variants: Optional[List[ModVariant]] = None):
        self._variants: Dict[str, ModVariant] = {}
        self._views: Dict[Tuple[str, int], EntityView] = {}
        for v in variants or []:
            self.register(v)

    def register(self, variant: ModVariant):
        self._variants[variant.id] = variant
        self._views = {k: v for k, v in self._views.items() if k[0] != variant.id}

    def find(self, variant_id: str) -> Optional[ModVariant]:
        return self._variants.get(to_id(variant_id))

    def get(self, variant_id: str) -> ModVariant:
        found = self.find(variant_id)
        if found is None:
            raise UnknownModVariant(variant_id)
        return found

    def ids(self) -> List[str]:
        return sorted(self._variants)

    def __contains__(self, variant_id: str) -> bool:
        return to_id(variant_id) in self._variants

    def view(self, variant_id: str, registry: EntityRegistry) -> EntityView:
        """Entity lookup for one variant; base records unless the variant overlays them."""
        if not variant_id:
            return EntityView(registry)
        key = (to_id(variant_id), id(registry))
        cached = self._views.get(key)
        if cached is not None:
            return cached
        variant = self.get(variant_id)
        overrides = {kind: registry.resolve_overlays(kind, overlays) for kind, overlays in variant.overlays.items()}
        view = EntityView(registry, overrides)
        self._views[key] = view
        logger.debug("ModViewBuilt", mod=variant.id, kinds=len(overrides))
        return view

__all__ = ["ModVariant","ModRegistry"]
