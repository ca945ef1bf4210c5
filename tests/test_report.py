from appsec_gym.validators.models import (
    IssueType,
    SecurityIssue,
    Severity,
    ValidationCheck,
    ValidationResult,
)
from appsec_gym.validators.report import format_report


def _result(passed: bool) -> ValidationResult:
    return ValidationResult(
        passed=passed,
        score=87.5 if passed else 40,
        grade="A-" if passed else "F",
        checks=[
            ValidationCheck(name="SQL Injection Protection", passed=passed, message="checked"),
            ValidationCheck(name="Static Analysis", passed=False, message="tools missing", partial=True),
        ],
        security_issues=[] if passed else [
            SecurityIssue(
                type=IssueType.VULNERABILITY,
                severity=Severity.HIGH,
                rule="sql-quote-concatenation",
                matches=['" + username'],
                message="String literal concatenated with a variable",
            ),
        ],
        recommendations=[] if passed else ["Use parameterized queries"],
    )


def test_passing_report() -> None:
    text = format_report(_result(True))

    assert "Security Validation Report" in text
    assert "Overall Score: 87.5/100 (A-)" in text
    assert "Status: PASSED" in text
    assert "[ok] SQL Injection Protection: checked" in text
    assert "[~] Static Analysis: tools missing" in text
    assert "Security Issues Found" not in text


def test_failing_report_lists_issues_and_recommendations() -> None:
    text = format_report(_result(False))

    assert "Overall Score: 40/100 (F)" in text
    assert "Status: FAILED" in text
    assert "[x] SQL Injection Protection" in text
    assert "1. HIGH - vulnerability" in text
    assert "Rule: sql-quote-concatenation" in text
    assert "Recommendations:" in text
    assert "1. Use parameterized queries" in text
