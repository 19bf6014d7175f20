"""Format resolution.

A format names other rule fragments (or formats) in its `ruleset`. Resolving
walks those references depth-first, ancestors before the leaf, and flattens
the chain into one ResolvedRuleSet:

* banlists concatenate in chain order; "Allow X" removes X from what has
  accumulated so far, so a leaf can re-permit an ancestor's ban
* hook contributions concatenate in chain order, except override points
  where the leaf-most contribution comes first
* results are memoized per canonical name until `reload()`
"""
from __future__ import annotations
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from arena.core.errors import ConfigurationError, CyclicRulesetReference, UnknownModVariant, UnknownRuleset
from arena.core.ids import ban_key, to_id
from arena.core.logging import logger
from arena.effects.handlers import EffectHandler
from arena.effects.library import HandlerLibrary, library as default_library
from arena.effects.points import Policy, get_point
from .banlist import allow_target, is_rule, parse_ban
from .types import Format, ResolvedRuleSet, RuleFragment

Hooks = Dict[str, Tuple[EffectHandler, ...]]

class FormatResolver:
    def __init__(self, fragments: Iterable[RuleFragment] = (), *, entities: Any = None,
                 handlers: Optional[HandlerLibrary] = None, mods: Any = None):
        self.entities = entities
        self.library = handlers or default_library
        self.mods = mods
        self._fragments: Dict[str, RuleFragment] = {}
        self._hooks: Dict[str, Hooks] = {}
        self._cache: Dict[str, ResolvedRuleSet] = {}
        self._broken: Dict[str, ConfigurationError] = {}
        self.reload(fragments)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def reload(self, fragments: Iterable[RuleFragment]):
        """Swap in a new fragment table and drop every memoized result."""
        table: Dict[str, RuleFragment] = {}
        hooks: Dict[str, Hooks] = {}
        broken: Dict[str, ConfigurationError] = {}
        for frag in fragments:
            if frag.id in table:
                logger.warn("DuplicateRuleset", name=frag.name, kept=table[frag.id].name)
                continue
            table[frag.id] = frag
            owner = f"format:{frag.id}"
            try:
                hooks[frag.id] = {
                    point: tuple(self.library.build(point, ref, owner) for ref in refs)
                    for point, refs in frag.hooks.items()
                }
            except ConfigurationError as e:
                # Only formats whose chain includes this fragment become unusable
                logger.error("RulesetUnusable", name=frag.name, error=str(e))
                broken[frag.id] = e
                hooks[frag.id] = {}
        # Readers grab these references once per resolve, so the swap is all-or-nothing
        self._fragments, self._hooks, self._broken, self._cache = table, hooks, broken, {}
        logger.debug("RulesetsLoaded", count=len(table))

    def get(self, name: str) -> Optional[RuleFragment]:
        return self._fragments.get(to_id(name))

    def formats(self) -> List[Format]:
        return [f for f in self._fragments.values() if isinstance(f, Format)]

    def fragments(self) -> List[RuleFragment]:
        return list(self._fragments.values())

    def is_cached(self, name: str) -> bool:
        return to_id(name) in self._cache

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def resolve(self, name: str) -> ResolvedRuleSet:
        fid = to_id(name)
        cached = self._cache.get(fid)
        if cached is not None:
            return cached
        fragments, hooks, broken, cache = self._fragments, self._hooks, self._broken, self._cache
        leaf = fragments.get(fid)
        if leaf is None:
            raise UnknownRuleset(name)
        chain = self._walk(leaf, fragments)
        for frag in chain:
            if frag.id in broken:
                raise broken[frag.id]
        result = self._flatten(leaf, chain, hooks)
        cache[fid] = result
        logger.debug("FormatResolved", format=leaf.name, chain=len(chain), bans=len(result.banlist))
        return result

    def apply_mod_variant(self, format_id: str, variant_id: str) -> ResolvedRuleSet:
        if self.mods is not None and variant_id and self.mods.find(variant_id) is None:
            raise UnknownModVariant(variant_id)
        return replace(self.resolve(format_id), mod=to_id(variant_id))

    def _walk(self, leaf: RuleFragment, fragments: Dict[str, RuleFragment]) -> List[RuleFragment]:
        order: List[RuleFragment] = []
        done: set[str] = set()
        path: List[RuleFragment] = []

        def visit(frag: RuleFragment):
            if any(p.id == frag.id for p in path):
                start = next(i for i, p in enumerate(path) if p.id == frag.id)
                raise CyclicRulesetReference([p.name for p in path[start:]] + [frag.name])
            if frag.id in done:
                return
            path.append(frag)
            for ref in frag.ruleset:
                child = fragments.get(to_id(ref))
                if child is None:
                    raise UnknownRuleset(ref, frag.name)
                visit(child)
            path.pop()
            done.add(frag.id)
            order.append(frag)

        visit(leaf)
        return order

    def _flatten(self, leaf: RuleFragment, chain: List[RuleFragment], hooks: Dict[str, Hooks]) -> ResolvedRuleSet:
        banned: Dict[str, str] = {}
        allowed: set[str] = set()
        for frag in chain:
            for entry in frag.banlist:
                target = allow_target(entry)
                if target is not None:
                    banned.pop(ban_key(target), None)
                    allowed.add(ban_key(target))
                else:
                    banned[ban_key(entry)] = entry
                    allowed.discard(ban_key(entry))

        bans = tuple(parse_ban(e, self.entities) for e in banned.values())
        rules = frozenset(to_id(e) for e in banned.values() if is_rule(e))

        merged: Dict[str, List[EffectHandler]] = {}
        for frag in chain:
            for point, handlers in hooks.get(frag.id, {}).items():
                merged.setdefault(point, []).extend(handlers)
        ordered: Hooks = {}
        for point, handlers in merged.items():
            if get_point(point).policy == Policy.OVERRIDE:
                # Leaf-most first: the most specific bundle decides
                by_depth = {f.id: i for i, f in enumerate(chain)}
                handlers = sorted(handlers, key=lambda h: -by_depth.get(h.owner.split(":", 1)[-1], 0))
            ordered[point] = tuple(handlers)

        fmt = leaf if isinstance(leaf, Format) else Format.from_fragment(leaf)
        return ResolvedRuleSet(
            format=fmt,
            chain=tuple(f.name for f in chain),
            banlist=frozenset(banned.values()),
            bans=bans,
            allowed=frozenset(allowed),
            rules=rules,
            hooks=ordered,
            mod=to_id(fmt.mod),
        )

__all__ = ["FormatResolver"]
