from appsec_gym.challenges import get_all_challenges
from appsec_gym.validators.registry import PatternRuleRegistry, default_registry
from appsec_gym.validators.rules import DEFAULT_CATEGORY, RULE_SETS


def test_direct_category_resolves_to_itself() -> None:
    assert default_registry.resolve_key("xss") == "xss"
    assert default_registry.lookup("auth").display_name == "Authentication Security"


def test_alias_resolves_to_target() -> None:
    assert default_registry.resolve_key("injection") == "sql-injection"
    assert default_registry.resolve_key("xxe") == "path-traversal"
    assert default_registry.is_fallback("injection") is False


def test_unknown_category_uses_default() -> None:
    assert default_registry.resolve_key("csrf") == DEFAULT_CATEGORY
    assert default_registry.is_fallback("csrf") is True


def test_no_default_returns_none() -> None:
    registry = PatternRuleRegistry(default_category=None)
    assert registry.lookup("csrf") is None
    assert registry.lookup("xss") is RULE_SETS["xss"]


def test_warn_unmapped_reports_each_category_once() -> None:
    unmapped = default_registry.warn_unmapped(["xss", "csrf", "csrf", "injection", "ssrf"])
    assert unmapped == ["csrf", "ssrf"]


def test_catalog_categories_all_have_rules() -> None:
    categories = [c.category for c in get_all_challenges()]
    assert default_registry.fallback_categories(categories) == []


def test_categories_lists_rule_sets() -> None:
    assert set(default_registry.categories()) == {"sql-injection", "xss", "auth", "path-traversal"}
