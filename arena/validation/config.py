"""Load-time configuration audit.

Reports defects in the static format configuration without resolving
anything: duplicate names, keys the schema does not know (typos such as
`banlists` are otherwise silently ignored), handler references missing from
the library, ruleset references to unknown names, and reference cycles.
"""
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import jsonschema

from arena.core.errors import ConfigurationError
from arena.core.ids import to_id
from arena.core.logging import logger
from arena.core.paths import SCHEMA
from arena.effects.library import HandlerLibrary, library as default_library, parse_refs
from arena.effects.points import is_point
from arena.entities.types import EntityKind, Overlay

SCHEMA_FILE = SCHEMA / "format.schema.json"

Record = Tuple[str, Mapping[str, Any]]

def load_schema(path: Path = SCHEMA_FILE) -> Dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))

def _schema_defects(records: Iterable[Record], schema: Dict[str, Any]) -> List[str]:
    validator = jsonschema.Draft7Validator(schema)
    out = []
    for source, raw in records:
        for err in sorted(validator.iter_errors(raw), key=lambda e: list(e.path)):
            out.append(f"{source}: '{raw.get('name', '?')}': {err.message}")
    return out

def _duplicate_defects(records: Iterable[Record]) -> List[str]:
    seen: Dict[str, str] = {}
    out = []
    for source, raw in records:
        fid = to_id(raw.get("name", ""))
        if fid in seen:
            out.append(f"{source}: duplicate format name '{raw['name']}' (first defined in {seen[fid]})")
        else:
            seen[fid] = source
    return out

def _handler_defects(records: Iterable[Record], library: HandlerLibrary) -> List[str]:
    out = []
    for source, raw in records:
        for key, value in raw.items():
            if not is_point(key):
                continue
            try:
                refs = parse_refs(value)
            except ConfigurationError as e:
                out.append(f"{source}: '{raw['name']}' {key}: {e}")
                continue
            for ref in refs:
                entry = library.get(ref.name)
                if entry is None:
                    out.append(f"{source}: '{raw['name']}' {key} references unknown handler '{ref.name}'")
                elif entry.points and key not in entry.points:
                    out.append(f"{source}: '{raw['name']}' handler '{ref.name}' does not support {key}")
    return out

def _reference_defects(records: Iterable[Record]) -> List[str]:
    records = list(records)
    known = {to_id(r.get("name", "")) for _, r in records}
    graph: Dict[str, List[str]] = {}
    names: Dict[str, str] = {}
    out = []
    for source, raw in records:
        fid = to_id(raw.get("name", ""))
        if fid in graph:
            continue
        names[fid] = raw["name"]
        graph[fid] = [to_id(r) for r in raw.get("ruleset", [])]
        for ref in raw.get("ruleset", []):
            if to_id(ref) not in known:
                out.append(f"{source}: '{raw['name']}' references unknown ruleset '{ref}'")

    reported = set()
    state: Dict[str, int] = {}  # 1 = on path, 2 = finished

    def visit(node: str, path: List[str]):
        state[node] = 1
        path.append(node)
        for child in graph.get(node, []):
            if child not in graph:
                continue
            if state.get(child) == 1:
                cycle = path[path.index(child):] + [child]
                key = frozenset(cycle)
                if key not in reported:
                    reported.add(key)
                    out.append("cyclic ruleset reference: " + " -> ".join(names[c] for c in cycle))
            elif state.get(child) is None:
                visit(child, path)
        path.pop()
        state[node] = 2

    for node in graph:
        if state.get(node) is None:
            visit(node, [])
    return out

def _mod_defects(records: Iterable[Record], mods: Any) -> List[str]:
    out = []
    for source, raw in records:
        mod = raw.get("mod")
        if mod and mods.find(mod) is None:
            out.append(f"{source}: '{raw['name']}' uses unknown mod '{mod}'")
    return out

def audit_overlays(overlays: Mapping[str, Mapping[EntityKind, Mapping[str, Overlay]]], entities: Any,
                   library: HandlerLibrary = default_library) -> List[str]:
    out = []
    for mod, per_kind in overlays.items():
        for kind, table in per_kind.items():
            for eid, overlay in table.items():
                if overlay.inherit and entities.find(kind, eid) is None:
                    out.append(f"mods/{mod}: {kind.value} '{eid}' inherits from an unregistered base")
                for point, refs in overlay.handlers.items():
                    for ref in refs:
                        if ref.name not in library:
                            out.append(f"mods/{mod}: {kind.value} '{eid}' {point} references unknown handler '{ref.name}'")
    return out

def audit_configuration(records: List[Record], *, library: HandlerLibrary = default_library,
                        schema: Optional[Dict[str, Any]] = None, entities: Any = None,
                        overlays: Optional[Mapping[str, Any]] = None, mods: Any = None) -> List[str]:
    """Return every configuration defect found; an empty list means clean."""
    defects = _schema_defects(records, schema if schema is not None else load_schema())
    defects += _duplicate_defects(records)
    defects += _handler_defects(records, library)
    defects += _reference_defects(records)
    if mods is not None:
        defects += _mod_defects(records, mods)
    if overlays and entities is not None:
        defects += audit_overlays(overlays, entities, library)
    for d in defects:
        logger.warn("ConfigurationDefect", detail=d)
    return defects

__all__ = ["SCHEMA_FILE","load_schema","audit_overlays","audit_configuration"]
