"""Pattern rule registry — resolves a challenge category to its rule set.

Resolution is direct key, then alias table, then the default category.
Unknown categories never fail validation; they produce a possibly
irrelevant but well-formed pattern check.
"""

from typing import Iterable, Mapping, Optional

import structlog

from appsec_gym.validators.rules import (
    CATEGORY_ALIASES,
    DEFAULT_CATEGORY,
    RULE_SETS,
    PatternRuleSet,
)

logger = structlog.get_logger()


class PatternRuleRegistry:
    """Read-only lookup table of pattern rule sets."""

    def __init__(
        self,
        rule_sets: Optional[Mapping[str, PatternRuleSet]] = None,
        aliases: Optional[Mapping[str, str]] = None,
        default_category: Optional[str] = DEFAULT_CATEGORY,
    ):
        self._rule_sets = dict(RULE_SETS if rule_sets is None else rule_sets)
        self._aliases = dict(CATEGORY_ALIASES if aliases is None else aliases)
        self.default_category = default_category

    def resolve_key(self, category: str) -> Optional[str]:
        """Return the rule-set key a category maps to, or None."""
        if category in self._rule_sets:
            return category

        alias = self._aliases.get(category)
        if alias in self._rule_sets:
            return alias

        if self.default_category in self._rule_sets:
            return self.default_category

        return None

    def lookup(self, category: str) -> Optional[PatternRuleSet]:
        """Return the rule set for a category, falling back to the default."""
        key = self.resolve_key(category)
        if key is None:
            return None
        return self._rule_sets[key]

    def is_fallback(self, category: str) -> bool:
        """True when a category resolves only through the default-on-miss policy."""
        return category not in self._rule_sets and self._aliases.get(category) not in self._rule_sets

    def fallback_categories(self, categories: Iterable[str]) -> list[str]:
        """Categories with neither a rule set nor an alias, in input order."""
        seen: list[str] = []
        for category in categories:
            if self.is_fallback(category) and category not in seen:
                seen.append(category)
        return seen

    def warn_unmapped(self, categories: Iterable[str]) -> list[str]:
        """Log a warning for each category that would silently use the default rules."""
        unmapped = self.fallback_categories(categories)
        for category in unmapped:
            logger.warning(
                "category_uses_default_rules",
                category=category,
                default=self.default_category,
            )
        return unmapped

    def categories(self) -> list[str]:
        return list(self._rule_sets.keys())


# Module-level singleton
default_registry = PatternRuleRegistry()
