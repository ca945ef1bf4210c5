"""Pattern Validator — first stage of the validation pipeline (max 60 points).

Counts known-bad and known-good idioms for the challenge's category and
scores the submission with a three-tier policy:

    no bad idioms, some good ones  → full credit
    no bad idioms, no good ones    → 70% (the vulnerable code is gone)
    bad idioms present             → 20 points off per occurrence

Deterministic, no tool calls.
"""

from typing import Optional

from appsec_gym.validators.base import BaseValidator, Submission
from appsec_gym.validators.models import (
    MAX_PATTERN_SCORE,
    PATTERN_NO_EVIDENCE_RATIO,
    PATTERN_PENALTY,
    IssueType,
    SecurityIssue,
    Severity,
    StageOutcome,
    partial_credit,
)
from appsec_gym.validators.registry import PatternRuleRegistry, default_registry
from appsec_gym.validators.rules import PatternRuleSet


def pattern_score(vulnerable_count: int, secure_count: int) -> float:
    """Sub-score for the given idiom counts."""
    if vulnerable_count == 0 and secure_count > 0:
        return float(MAX_PATTERN_SCORE)
    if vulnerable_count == 0:
        return partial_credit(MAX_PATTERN_SCORE, PATTERN_NO_EVIDENCE_RATIO)
    return float(max(0, MAX_PATTERN_SCORE - vulnerable_count * PATTERN_PENALTY))


class PatternValidator(BaseValidator):
    """Scores submitted source text against the category's rule set."""

    max_score = MAX_PATTERN_SCORE

    def __init__(self, registry: Optional[PatternRuleRegistry] = None):
        self.registry = registry or default_registry

    @property
    def name(self) -> str:
        return "PatternValidator"

    async def evaluate(self, submission: Submission) -> StageOutcome:
        return self.evaluate_text(submission.category, submission.content)

    def evaluate_text(self, category: str, content: str) -> StageOutcome:
        """Synchronous core, usable without an event loop."""
        rules = self.registry.lookup(category)
        if rules is None:
            return StageOutcome(
                score=0.0,
                checks=[self._check(
                    name="Pattern Validation",
                    passed=False,
                    message=f"No validation rules found for category: {category}",
                )],
            )

        issues: list[SecurityIssue] = []
        vulnerable_count = 0
        for rule in rules.vulnerable_patterns:
            matches = rule.find_all(content)
            if not matches:
                continue
            vulnerable_count += len(matches)
            issues.append(SecurityIssue(
                type=IssueType.VULNERABILITY,
                severity=Severity.HIGH,
                rule=rule.id,
                pattern=rule.regex,
                matches=matches,
                message=rule.description,
            ))

        secure_count = sum(len(rule.find_all(content)) for rule in rules.secure_patterns)

        score = pattern_score(vulnerable_count, secure_count)
        passed = vulnerable_count == 0

        if passed:
            message = f"No {rules.display_name.lower()} vulnerabilities detected"
        else:
            message = f"Found {vulnerable_count} potential vulnerabilities"

        return StageOutcome(
            score=score,
            checks=[self._check(
                name=rules.display_name,
                passed=passed,
                message=message,
                details={
                    "vulnerable_patterns": vulnerable_count,
                    "secure_patterns": secure_count,
                    "score": score,
                },
            )],
            issues=issues,
            recommendations=self._recommendations(rules, vulnerable_count, secure_count),
        )

    def _recommendations(self, rules: PatternRuleSet, vulnerable_count: int, secure_count: int) -> list[str]:
        if vulnerable_count > 0:
            return list(rules.recommendations)
        if secure_count == 0 and rules.recommendations:
            # Bad idiom removed but no protective idiom recognised yet
            return [rules.recommendations[0]]
        return []
