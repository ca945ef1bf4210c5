"""Validation models — issue types, severity levels, scoring, and result structure.

Scoring is deterministic: same submission and same tool output → same result.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """Security issue severity levels."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class IssueType(str, Enum):
    """Which validation stage produced an issue."""

    VULNERABILITY = "vulnerability"
    STATIC_ANALYSIS = "static-analysis"
    DEPENDENCY = "dependency"


# ──────────────────────────────────────────────────────────────────────
# SCORE BUDGET (sums to MAX_SCORE)
# ──────────────────────────────────────────────────────────────────────

MAX_SCORE = 100
PASS_THRESHOLD = 80

MAX_PATTERN_SCORE = 60
MAX_STATIC_SCORE = 25
MAX_DEPENDENCY_SCORE = 15

PATTERN_PENALTY = 20       # per vulnerable pattern occurrence
STATIC_PENALTY = 5         # per security lint diagnostic
DEPENDENCY_PENALTY = 3     # per vulnerable package

# Removing the bad idiom without a visible fix still earns most of the credit
PATTERN_NO_EVIDENCE_RATIO = 0.7
# Tool unavailable → partial credit instead of failing the attempt
STATIC_UNAVAILABLE_RATIO = 0.5
DEPENDENCY_UNAVAILABLE_RATIO = 0.8

GRADE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (95, "A+"),
    (90, "A"),
    (85, "A-"),
    (80, "B+"),
    (75, "B"),
    (70, "B-"),
    (65, "C+"),
    (60, "C"),
    (55, "C-"),
)
FAILING_GRADE = "F"


def calculate_grade(score: float) -> str:
    """Map a 0-100 score to a letter grade."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return FAILING_GRADE


def partial_credit(max_score: int, ratio: float) -> float:
    return round(max_score * ratio, 2)


class ValidationCheck(BaseModel):
    """Outcome of one validation stage."""

    name: str
    passed: bool
    message: str
    details: Optional[dict[str, Any]] = None
    partial: bool = Field(default=False, description="Tool unavailable, partial credit awarded")


class SecurityIssue(BaseModel):
    """A single finding. Stage-specific fields are left empty by other stages."""

    type: IssueType
    severity: Severity
    rule: Optional[str] = None       # Pattern id or lint rule id
    pattern: Optional[str] = None    # Regex source for pattern findings
    matches: list[str] = Field(default_factory=list)
    message: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None
    package: Optional[str] = None
    title: Optional[str] = None

    model_config = {"use_enum_values": True}


class StageOutcome(BaseModel):
    """What a single validator contributes to the aggregate result."""

    score: float = 0.0
    checks: list[ValidationCheck] = Field(default_factory=list)
    issues: list[SecurityIssue] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Complete validation result — the output of the validation engine."""

    passed: bool = Field(description="True iff score >= 80")
    score: float = Field(description="Aggregate score 0-100")
    max_score: int = MAX_SCORE
    grade: str
    checks: list[ValidationCheck] = Field(default_factory=list)
    security_issues: list[SecurityIssue] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def build(cls, outcomes: list[StageOutcome], error: Optional[str] = None) -> "ValidationResult":
        """Aggregate stage outcomes into a result.

        When ``error`` is given the run was cut short: a failing
        "Validation Error" check is appended and the result never passes.
        """
        checks: list[ValidationCheck] = []
        issues: list[SecurityIssue] = []
        recommendations: list[str] = []
        score = 0.0

        for outcome in outcomes:
            score += max(0.0, outcome.score)
            checks.extend(outcome.checks)
            issues.extend(outcome.issues)
            for rec in outcome.recommendations:
                if rec not in recommendations:
                    recommendations.append(rec)

        score = round(min(score, MAX_SCORE), 2)

        if error is not None:
            checks.append(ValidationCheck(
                name="Validation Error",
                passed=False,
                message=f"Validation failed: {error}",
            ))
            passed = False
        else:
            passed = score >= PASS_THRESHOLD

        return cls(
            passed=passed,
            score=score,
            grade=calculate_grade(score),
            checks=checks,
            security_issues=issues,
            recommendations=recommendations,
        )
