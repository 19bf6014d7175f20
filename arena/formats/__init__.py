"""Format bundles, rule fragments and their resolution into rule sets."""
from .types import BanKind, BanEntry, RuleFragment, Format, ResolvedRuleSet
from .resolver import FormatResolver

__all__ = ["BanKind","BanEntry","RuleFragment","Format","ResolvedRuleSet","FormatResolver"]
