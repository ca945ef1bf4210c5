"""Solution validator — scores a submitted fix for a vulnerable-code challenge.

Usage:
    from appsec_gym.validators import ValidationEngine

    result = await ValidationEngine().validate(challenge, file_paths, content)
    if not result.passed:
        # Show format_report(result) and let the user keep editing
"""

from appsec_gym.validators.engine import ValidationEngine
from appsec_gym.validators.legacy import LegacyValidator, LegacyVerdict
from appsec_gym.validators.models import (
    IssueType,
    SecurityIssue,
    Severity,
    ValidationCheck,
    ValidationResult,
    calculate_grade,
)
from appsec_gym.validators.registry import PatternRuleRegistry, default_registry
from appsec_gym.validators.report import format_report, print_report

__all__ = [
    "ValidationEngine",
    "LegacyValidator",
    "LegacyVerdict",
    "IssueType",
    "SecurityIssue",
    "Severity",
    "ValidationCheck",
    "ValidationResult",
    "calculate_grade",
    "PatternRuleRegistry",
    "default_registry",
    "format_report",
    "print_report",
]
