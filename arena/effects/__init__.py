"""Lifecycle points, the handler contract, and the named handler library."""
from .points import Policy, LifecyclePoint, POINTS, get_point, is_point
from .handlers import STOP, HookContext, EffectHandler, compose
from .library import HandlerLibrary, HandlerRef, library, parse_ref, parse_refs

__all__ = [
    "Policy","LifecyclePoint","POINTS","get_point","is_point",
    "STOP","HookContext","EffectHandler","compose",
    "HandlerLibrary","HandlerRef","library","parse_ref","parse_refs",
]
