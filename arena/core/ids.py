"""Canonical ids: lowercase alphanumerics only ("[Gen 5] OU" -> "gen5ou")."""
from __future__ import annotations
import re

_NON_ID = re.compile(r"[^a-z0-9]+")

def to_id(text: object) -> str:
    if text is None:
        return ""
    return _NON_ID.sub("", str(text).lower())

def ban_key(entry: object) -> str:
    """Like to_id but keeps combo operators: "A + B" -> "a+b", "A ++ B" -> "a++b"."""
    text = "" if entry is None else str(entry)
    for op in ("++", "+"):
        if op in text:
            return op.join(to_id(p) for p in text.split(op) if p.strip())
    return to_id(text)

__all__ = ["to_id","ban_key"]
