"""
Arena - rule & effect composition engine for team-based creature battles.

The engine resolves named competitive formats into flattened rule sets,
builds entity records (species, items, abilities, moves, conditions) from
base definitions plus overlays, and dispatches lifecycle hooks for the
battle runtime.
"""

__version__ = "0.1.0"
