"""Rule registry — loads built-in and custom rules, applies config filters."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml

from safemongo.config.schema import SafeMongoConfig
from safemongo.errors import CatalogError, ConfigError, RuleError
from safemongo.rules.models import Rule

logger = logging.getLogger(__name__)

CUSTOM_RULES_DIRNAME = ".safemongo-rules"


class RuleRegistry:
    """Ordered store for detection rules.

    Registration order is preserved and is the tie-break order used by the
    scan engine. Rules themselves are immutable; enabling/disabling is
    tracked here, not on the rule.
    """

    def __init__(self) -> None:
        self._rules: Dict[str, Rule] = {}
        self._disabled: set[str] = set()

    # ---- registration ----

    def register(self, rule: Rule) -> None:
        if rule.id in self._rules:
            raise CatalogError(f"Duplicate rule id: {rule.id}")
        self._rules[rule.id] = rule

    def register_many(self, rules: Iterable[Rule]) -> None:
        for r in rules:
            self.register(r)

    # ---- queries ----

    @property
    def all_rules(self) -> List[Rule]:
        return list(self._rules.values())

    def get(self, rule_id: str) -> Optional[Rule]:
        return self._rules.get(rule_id)

    def is_enabled(self, rule_id: str) -> bool:
        return rule_id in self._rules and rule_id not in self._disabled

    def enabled_rules(self) -> List[Rule]:
        return [r for r in self._rules.values() if r.id not in self._disabled]

    def __len__(self) -> int:
        return len(self._rules)

    # ---- config filtering ----

    def apply_config(self, config: SafeMongoConfig) -> None:
        """Enable / disable rules based on config.rules + config.ignore.rules."""
        enable_list = config.rules.enable
        disable_list = set(config.rules.disable) | set(config.ignore.rules)

        unknown = (set(enable_list) | disable_list) - set(self._rules)
        for rule_id in sorted(unknown):
            logger.warning("Config references unknown rule id %s", rule_id)

        self._disabled = set()
        for rule_id in self._rules:
            # If an explicit enable-list exists, only those are enabled
            if enable_list and rule_id not in enable_list:
                self._disabled.add(rule_id)
            # Disable list always takes precedence
            if rule_id in disable_list:
                self._disabled.add(rule_id)

    # ---- custom rule loading ----

    def load_custom_rules(self, directory: Path) -> int:
        """Load YAML rule files from *directory*. Returns count loaded."""
        count = 0
        if not directory.is_dir():
            return 0
        for path in sorted(directory.iterdir()):
            if path.suffix in (".yaml", ".yml"):
                count += self._load_yaml_rules(path)
        if count:
            logger.info("Loaded %d custom rule(s) from %s", count, directory)
        return count

    def _load_yaml_rules(self, path: Path) -> int:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to load custom rules from {path}: {exc}") from exc
        if data is None:
            return 0
        if not isinstance(data, list):
            data = [data]
        count = 0
        for entry in data:
            if not isinstance(entry, dict) or "id" not in entry or "pattern" not in entry:
                raise ConfigError(f"{path}: each rule needs at least 'id' and 'pattern'")
            try:
                rule = Rule(
                    id=str(entry["id"]),
                    name=entry.get("name", entry["id"]),
                    pattern=entry["pattern"],
                    severity=entry.get("severity", "medium"),
                    description=entry.get("description", ""),
                    remediation=entry.get("remediation", ""),
                    unsafe_example=entry.get("unsafe_example", ""),
                    safe_example=entry.get("safe_example", ""),
                    reference_url=entry.get(
                        "reference_url", "https://www.mongodb.com/docs/manual/security/"
                    ),
                    category=entry.get("category", "injection"),
                )
                self.register(rule)
            except (RuleError, CatalogError) as exc:
                raise ConfigError(f"{path}: {exc}") from exc
            count += 1
        return count


def build_registry(config: SafeMongoConfig, root: Path) -> RuleRegistry:
    """Create a fully populated, config-filtered rule registry."""
    from safemongo.rules.unsafe_queries import all_rules

    registry = RuleRegistry()
    registry.register_many(all_rules())

    # Custom rules from .safemongo-rules/ are appended after the catalog
    registry.load_custom_rules(root / CUSTOM_RULES_DIRNAME)

    registry.apply_config(config)
    logger.debug(
        "Registry ready: %d rules, %d enabled", len(registry), len(registry.enabled_rules())
    )
    return registry
