"""
Error classes for clearer exception sources.
"""
from __future__ import annotations
from typing import Iterable, List, Sequence

class ArenaError(Exception):
    pass

class DataLoadError(ArenaError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to load {path}: {detail}")
        self.path = path
        self.detail = detail

class ConfigurationError(ArenaError):
    """Fatal at load/resolve time; the affected format is unusable until fixed."""

class UnknownRuleset(ConfigurationError):
    def __init__(self, name: str, referenced_by: str | None = None):
        where = f" (referenced by '{referenced_by}')" if referenced_by else ""
        super().__init__(f"Unknown ruleset '{name}'{where}")
        self.name = name
        self.referenced_by = referenced_by

class CyclicRulesetReference(ConfigurationError):
    def __init__(self, cycle: Sequence[str]):
        super().__init__("Cyclic ruleset reference: " + " -> ".join(cycle))
        self.cycle = list(cycle)

class UnknownBaseEntity(ConfigurationError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"Overlay for {kind} '{entity_id}' inherits from an unregistered base")
        self.kind = kind
        self.entity_id = entity_id

class DuplicateEntity(ConfigurationError):
    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"Duplicate {kind} id '{entity_id}'")
        self.kind = kind
        self.entity_id = entity_id

class UnknownHandler(ConfigurationError):
    def __init__(self, name: str, owner: str | None = None):
        where = f" on {owner}" if owner else ""
        super().__init__(f"Unknown handler '{name}'{where}")
        self.name = name
        self.owner = owner

class UnknownLifecyclePoint(ConfigurationError):
    def __init__(self, point: str):
        super().__init__(f"Unknown lifecycle point '{point}'")
        self.point = point

class UnknownModVariant(ConfigurationError):
    def __init__(self, variant_id: str):
        super().__init__(f"Unknown mod variant '{variant_id}'")
        self.variant_id = variant_id

class ValidationRejection(ArenaError):
    """A team failed validation. User-facing, never a fault."""
    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        super().__init__(f"Team rejected with {len(self.problems)} problem(s)")
