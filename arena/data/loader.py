"""Static configuration loaders.

Formats:   assets/formats/*.json           list of records (rulesets.json holds fragments)
Entities:  assets/entities/<kind>.json     mapping id -> record
Mods:      assets/mods/<mod>/<kind>.json   mapping id -> overlay record

Files are read through a cached reader; `clear_cache()` drops it on reload.
"""
from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from arena.core.errors import DataLoadError
from arena.core.logging import logger
from arena.core.paths import ASSETS
from arena.effects.library import parse_refs
from arena.effects.points import is_point
from arena.entities.registry import EntityRegistry, overlay_from_record
from arena.entities.types import EntityKind, Overlay
from arena.formats.types import Format, RuleFragment

FRAGMENTS_FILE = "rulesets.json"

ENTITY_FILES = {
    EntityKind.SPECIES: "species.json",
    EntityKind.ITEM: "items.json",
    EntityKind.ABILITY: "abilities.json",
    EntityKind.MOVE: "moves.json",
    EntityKind.CONDITION: "conditions.json",
}

# record key -> Format field
FORMAT_KEYS = {
    "section": "section",
    "column": "column",
    "mod": "mod",
    "gameType": "game_type",
    "team": "team",
    "minTeamSize": "min_team_size",
    "maxTeamSize": "max_team_size",
    "maxLevel": "max_level",
    "defaultLevel": "default_level",
    "maxForcedLevel": "max_forced_level",
    "maxMoves": "max_moves",
    "searchShow": "search_show",
    "challengeShow": "challenge_show",
    "rated": "rated",
    "debug": "debug",
    "canUseRandomTeam": "can_use_random_team",
}

@lru_cache(maxsize=None)
def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataLoadError(path, str(e)) from e

def read_json(path: Path) -> Any:
    return _read_json(str(path))

def clear_cache():
    _read_json.cache_clear()

# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------

def format_files(assets: Path = ASSETS) -> List[Path]:
    root = assets / "formats"
    if not root.exists():
        logger.warn("Formats directory missing", path=str(root))
        return []
    return sorted(root.glob("*.json"))

def load_format_records(assets: Path = ASSETS) -> List[Tuple[str, Dict[str, Any]]]:
    """Raw records with the file they came from, in load order (fragments first)."""
    files = format_files(assets)
    files.sort(key=lambda p: p.name != FRAGMENTS_FILE)
    records: List[Tuple[str, Dict[str, Any]]] = []
    for path in files:
        data = read_json(path)
        if not isinstance(data, list):
            raise DataLoadError(str(path), "expected a list of format records")
        for raw in data:
            if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
                raise DataLoadError(str(path), f"malformed record: {raw!r}")
            records.append((path.name, raw))
    return records

def record_to_fragment(record: Mapping[str, Any], *, is_format: bool = True) -> RuleFragment:
    hooks = {k: tuple(parse_refs(v)) for k, v in record.items() if is_point(k)}
    common = dict(
        name=record["name"],
        ruleset=tuple(record.get("ruleset", ())),
        banlist=tuple(record.get("banlist", ())),
        hooks=hooks,
        desc=record.get("desc", ""),
    )
    if not is_format:
        return RuleFragment(**common)
    meta = {field: record[key] for key, field in FORMAT_KEYS.items() if key in record}
    return Format(**common, **meta)

# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------

def load_entities(registry: EntityRegistry, assets: Path = ASSETS) -> EntityRegistry:
    root = assets / "entities"
    for kind, filename in ENTITY_FILES.items():
        path = root / filename
        if not path.exists():
            logger.warn("Entity file missing", kind=kind.value, path=str(path))
            continue
        data = read_json(path)
        if not isinstance(data, dict):
            raise DataLoadError(str(path), "expected a mapping of id -> record")
        for entity_id, record in data.items():
            registry.register_record(kind, entity_id, record)
    logger.info("Entities loaded", count=len(registry))
    return registry

def load_mod_overlays(assets: Path = ASSETS) -> Dict[str, Dict[EntityKind, Dict[str, Overlay]]]:
    root = assets / "mods"
    result: Dict[str, Dict[EntityKind, Dict[str, Overlay]]] = {}
    if not root.exists():
        return result
    for mod_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        per_kind: Dict[EntityKind, Dict[str, Overlay]] = {}
        for kind, filename in ENTITY_FILES.items():
            path = mod_dir / filename
            if not path.exists():
                continue
            data = read_json(path)
            if not isinstance(data, dict):
                raise DataLoadError(str(path), "expected a mapping of id -> overlay")
            per_kind[kind] = {eid: overlay_from_record(rec) for eid, rec in data.items()}
        result[mod_dir.name] = per_kind
        logger.debug("Mod overlays loaded", mod=mod_dir.name, kinds=len(per_kind))
    return result

__all__ = ["FRAGMENTS_FILE","ENTITY_FILES","FORMAT_KEYS","read_json","clear_cache","format_files",
           "load_format_records","record_to_fragment","load_entities","load_mod_overlays"]
