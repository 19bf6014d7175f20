"""Mod variants: per-format swaps of baseline formulas and entity data."""
from .variants import ModVariant, ModRegistry
from . import formulas

__all__ = ["ModVariant","ModRegistry","formulas"]
