"""Entity records: species, items, abilities, moves and conditions."""
from .types import Entity, EntityKind, Overlay
from .registry import EntityRegistry, EntityView

__all__ = ["Entity","EntityKind","Overlay","EntityRegistry","EntityView"]
