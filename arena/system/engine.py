"""Process-wide rules engine.

Owns the entity registry, the format resolver and the mod registry. State is
built once by `load()` and replaced wholesale by `reload_configuration()`;
callers that captured a ResolvedRuleSet (a running match) keep their snapshot.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from arena.core.errors import ArenaError, ConfigurationError
from arena.core.logging import logger
from arena.core.paths import ASSETS
from arena.data import loader
from arena.effects import builtin as _builtin_handlers  # registers the named handler library
from arena.effects.dispatcher import HookDispatcher
from arena.effects.library import HandlerLibrary, library as default_library
from arena.entities.registry import EntityRegistry, EntityView
from arena.formats.resolver import FormatResolver
from arena.formats.types import ResolvedRuleSet
from arena.mods.builtin import register_builtin as register_builtin_mods
from arena.mods.variants import ModRegistry, ModVariant
from arena.validation.config import audit_configuration
from arena.validation.team import check_team, validate_set
from .settings import Settings, SettingsData

@dataclass(frozen=True)
class EngineState:
    registry: EntityRegistry
    resolver: FormatResolver
    mods: ModRegistry
    defects: Tuple[str, ...] = ()

class RulesEngine:
    def __init__(self, assets: Optional[Path] = None, *, settings: Optional[Settings] = None,
                 library: Optional[HandlerLibrary] = None):
        self.settings = settings
        self.library = library or default_library
        self.assets = Path(assets) if assets else self._assets_from(settings)
        self._state: Optional[EngineState] = None
        if settings is not None:
            settings.apply_log_level()
            settings.on_change(self._on_settings_change)

    @staticmethod
    def _assets_from(settings: Optional[Settings]) -> Path:
        if settings is not None and settings.data.assets_dir:
            return Path(settings.data.assets_dir)
        return ASSETS

    def _on_settings_change(self, data: SettingsData):
        logger.set_level(data.log_level)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def loaded(self) -> bool:
        return self._state is not None

    def load(self) -> "RulesEngine":
        if self._state is None:
            self._state = self._build()
        return self

    def reload_configuration(self) -> "RulesEngine":
        loader.clear_cache()
        state = self._build()
        self._state = state
        logger.info("ConfigurationReloaded", formats=len(state.resolver.formats()), defects=len(state.defects))
        return self

    def _build(self) -> EngineState:
        registry = loader.load_entities(EntityRegistry(self.library), self.assets)
        mods = register_builtin_mods(ModRegistry())
        overlays = loader.load_mod_overlays(self.assets)
        for mod_id, per_kind in overlays.items():
            variant = mods.find(mod_id)
            if variant is None:
                variant = ModVariant(mod_id)
            for kind, table in per_kind.items():
                variant.add_overlays(kind, table)
            mods.register(variant)

        records = loader.load_format_records(self.assets)
        defects = audit_configuration(records, library=self.library, entities=registry,
                                      overlays=overlays, mods=mods)
        if defects and self.settings is not None and self.settings.data.strict_config:
            raise ConfigurationError(f"{len(defects)} configuration defect(s); first: {defects[0]}")

        fragments = [loader.record_to_fragment(raw, is_format=(source != loader.FRAGMENTS_FILE))
                     for source, raw in records]
        resolver = FormatResolver(fragments, entities=registry, handlers=self.library, mods=mods)
        return EngineState(registry, resolver, mods, tuple(defects))

    @property
    def state(self) -> EngineState:
        if self._state is None:
            raise ArenaError("RulesEngine used before load()")
        return self._state

    @property
    def registry(self) -> EntityRegistry:
        return self.state.registry

    @property
    def resolver(self) -> FormatResolver:
        return self.state.resolver

    @property
    def mods(self) -> ModRegistry:
        return self.state.mods

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def resolve(self, name: str, mod: Optional[str] = None) -> ResolvedRuleSet:
        if mod is not None:
            return self.resolver.apply_mod_variant(name, mod)
        return self.resolver.resolve(name)

    def entity_view(self, ruleset: ResolvedRuleSet) -> EntityView:
        state = self.state
        return state.mods.view(ruleset.mod, state.registry)

    def dispatcher(self, ruleset: ResolvedRuleSet) -> HookDispatcher:
        state = self.state
        variant = state.mods.get(ruleset.mod) if ruleset.mod else None
        return HookDispatcher(ruleset, state.mods.view(ruleset.mod, state.registry), variant)

    def check_team(self, format_name: str, team: Iterable[Any]):
        ruleset = self.resolve(format_name)
        d = self.dispatcher(ruleset)
        return check_team(team, ruleset, entities=d.entities, dispatcher=d)

    def validate_team(self, format_name: str, team: Iterable[Any]) -> List[str]:
        return self.check_team(format_name, team)[1]

    def validate_set(self, format_name: str, entry: Any) -> List[str]:
        ruleset = self.resolve(format_name)
        d = self.dispatcher(ruleset)
        return validate_set(entry, ruleset, entities=d.entities, dispatcher=d)

    def audit(self) -> List[str]:
        return list(self.state.defects)

    def sections(self) -> Dict[str, List[Any]]:
        out: Dict[str, List[Any]] = {}
        for fmt in self.resolver.formats():
            out.setdefault(fmt.section or "Other", []).append(fmt)
        return out

__all__ = ["RulesEngine","EngineState"]
