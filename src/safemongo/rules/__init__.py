"""Rule engine — models, registry, built-in catalog."""

from safemongo.rules.models import Rule
from safemongo.rules.registry import RuleRegistry, build_registry
from safemongo.rules.unsafe_queries import all_rules, get_rule

__all__ = ["Rule", "RuleRegistry", "all_rules", "build_registry", "get_rule"]
