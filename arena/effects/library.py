"""Named handler library.

Configuration never carries code: formats and entity records reference
handlers by name (optionally with arguments), and the library turns each
reference into an EffectHandler bound to its owner.

Reference forms accepted in configuration:
    "species_clause"
    {"use": "truncate_team", "args": {"size": 3}}
    {"use": "confuse_if_nature_minus", "args": {"stat": "atk"}, "compose": "extend"}
"""
from __future__ import annotations
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from arena.core.errors import ConfigurationError, UnknownHandler
from .handlers import EffectHandler, compose
from .points import get_point

REPLACE = "replace"
EXTEND = "extend"

@dataclass(frozen=True)
class LibraryEntry:
    name: str
    fn: Callable[..., Any]
    points: Tuple[str, ...] = ()

@dataclass(frozen=True)
class HandlerRef:
    name: str
    args: Dict[str, Any]
    mode: str = REPLACE

def parse_ref(raw: Any) -> HandlerRef:
    if isinstance(raw, str):
        return HandlerRef(raw, {})
    if isinstance(raw, dict) and isinstance(raw.get("use"), str):
        mode = raw.get("compose", REPLACE)
        if mode not in (REPLACE, EXTEND):
            raise ConfigurationError(f"Handler '{raw['use']}' has unknown compose mode '{mode}'")
        return HandlerRef(raw["use"], dict(raw.get("args") or {}), mode)
    raise ConfigurationError(f"Malformed handler reference: {raw!r}")

def parse_refs(raw: Any) -> List[HandlerRef]:
    if raw is None:
        return []
    if isinstance(raw, list):
        return [parse_ref(r) for r in raw]
    return [parse_ref(raw)]

class HandlerLibrary:
    def __init__(self):
        self._entries: Dict[str, LibraryEntry] = {}

    def register(self, name: str, fn: Callable[..., Any], points: Iterable[str] = ()):
        pts = tuple(points)
        for p in pts:
            get_point(p)
        self._entries[name] = LibraryEntry(name, fn, pts)

    def get(self, name: str) -> Optional[LibraryEntry]:
        return self._entries.get(name)

    def names(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def build(self, point: str, ref: HandlerRef, owner: str = "") -> EffectHandler:
        get_point(point)
        entry = self.get(ref.name)
        if entry is None:
            raise UnknownHandler(ref.name, owner or None)
        if entry.points and point not in entry.points:
            raise ConfigurationError(f"Handler '{ref.name}' does not support point '{point}'")
        fn = partial(entry.fn, **ref.args) if ref.args else entry.fn
        return EffectHandler(point, fn, name=ref.name, owner=owner)

    def build_chain(self, point: str, refs: List[HandlerRef], owner: str = "") -> Optional[EffectHandler]:
        """Fold several references for one point into a single handler, in order."""
        handler: Optional[EffectHandler] = None
        for ref in refs:
            built = self.build(point, ref, owner)
            handler = built if handler is None else compose(handler, built)
        return handler

library = HandlerLibrary()

__all__ = ["REPLACE","EXTEND","LibraryEntry","HandlerRef","parse_ref","parse_refs","HandlerLibrary","library"]
