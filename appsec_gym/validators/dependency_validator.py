"""Dependency Validator — third stage of the pipeline (max 15 points).

A workspace without package.json has nothing to be vulnerable and gets full
credit. Otherwise ``npm audit --json`` is run; each vulnerable package costs
3 points. If the audit cannot be run the stage awards 80% and says so.
"""

import json
from typing import Any, Optional

import structlog

from appsec_gym.config import get_settings
from appsec_gym.errors import ToolExecutionError
from appsec_gym.services.tool_runner import ToolRunner, split_command
from appsec_gym.validators.base import BaseValidator, Submission
from appsec_gym.validators.models import (
    DEPENDENCY_PENALTY,
    DEPENDENCY_UNAVAILABLE_RATIO,
    MAX_DEPENDENCY_SCORE,
    IssueType,
    SecurityIssue,
    Severity,
    StageOutcome,
    partial_credit,
)
from appsec_gym.validators.rules import DEPENDENCY_MANIFEST, NPM_SEVERITY_MAP

logger = structlog.get_logger()


def parse_audit_output(stdout: str) -> dict[str, dict[str, Any]]:
    """Extract the ``vulnerabilities`` mapping from ``npm audit --json`` output.

    Raises ValueError when the output is empty, not JSON, or an npm error report
    (e.g. ENOLOCK when the workspace has no lockfile).
    """
    if not stdout.strip():
        raise ValueError("npm audit produced no output")

    data = json.loads(stdout)
    if not isinstance(data, dict):
        raise ValueError("Unexpected npm audit output format")
    if "error" in data:
        error = data["error"]
        code = error.get("code") if isinstance(error, dict) else error
        raise ValueError(f"npm audit reported an error: {code}")

    vulnerabilities = data.get("vulnerabilities") or {}
    if not isinstance(vulnerabilities, dict):
        raise ValueError("Unexpected npm audit vulnerabilities format")
    return {name: entry if isinstance(entry, dict) else {} for name, entry in vulnerabilities.items()}


def _advisory_title(entry: dict[str, Any]) -> Optional[str]:
    if entry.get("title"):
        return entry["title"]
    for via in entry.get("via") or []:
        if isinstance(via, dict) and via.get("title"):
            return via["title"]
    return None


def _issue_severity(npm_severity: Optional[str]) -> Severity:
    return Severity(NPM_SEVERITY_MAP.get(str(npm_severity).lower(), Severity.MEDIUM.value))


class DependencyValidator(BaseValidator):
    """Known-vulnerability audit of the workspace's declared dependencies."""

    max_score = MAX_DEPENDENCY_SCORE

    def __init__(
        self,
        runner: Optional[ToolRunner] = None,
        command: Optional[str] = None,
        enabled: Optional[bool] = None,
    ):
        settings = get_settings()
        self.runner = runner or ToolRunner()
        self.command = command or settings.NPM_COMMAND
        self.enabled = settings.ENABLE_DEPENDENCY_SCAN if enabled is None else enabled

    @property
    def name(self) -> str:
        return "DependencyValidator"

    async def evaluate(self, submission: Submission) -> StageOutcome:
        workspace = submission.workspace
        if workspace is not None and not (workspace / DEPENDENCY_MANIFEST).exists():
            return StageOutcome(
                score=float(MAX_DEPENDENCY_SCORE),
                checks=[self._check(
                    name="Dependency Security Scan",
                    passed=True,
                    message="No package.json - no dependencies to audit",
                    details={"vulnerabilities": 0},
                )],
            )

        try:
            vulnerabilities = await self._run_audit(submission)
        except (ToolExecutionError, ValueError, OSError) as e:
            logger.warning("dependency_scan_unavailable", challenge_id=submission.challenge_id, error=str(e))
            return self._unavailable()

        count = len(vulnerabilities)
        score = float(MAX_DEPENDENCY_SCORE) if count == 0 else self._clamp(MAX_DEPENDENCY_SCORE - count * DEPENDENCY_PENALTY)

        issues = [
            SecurityIssue(
                type=IssueType.DEPENDENCY,
                package=package,
                severity=_issue_severity(entry.get("severity")),
                title=_advisory_title(entry),
            )
            for package, entry in vulnerabilities.items()
        ]

        return StageOutcome(
            score=score,
            checks=[self._check(
                name="Dependency Security Scan",
                passed=count == 0,
                message=(
                    "No known vulnerabilities in dependencies"
                    if count == 0
                    else f"Found {count} vulnerable dependencies"
                ),
                details={"vulnerabilities": count, "score": score},
            )],
            issues=issues,
            recommendations=(
                ["Upgrade vulnerable dependencies (npm audit fix) or replace them"] if count else []
            ),
        )

    async def _run_audit(self, submission: Submission) -> dict[str, dict[str, Any]]:
        if not self.enabled:
            raise ToolExecutionError("npm audit", "dependency scan disabled by configuration")

        workspace = submission.workspace
        if workspace is None:
            raise ToolExecutionError("npm audit", "no workspace to audit")

        argv = [*split_command(self.command), "audit", "--json"]
        result = await self.runner.run(argv, cwd=workspace)
        return parse_audit_output(result.stdout)

    def _unavailable(self) -> StageOutcome:
        return StageOutcome(
            score=partial_credit(MAX_DEPENDENCY_SCORE, DEPENDENCY_UNAVAILABLE_RATIO),
            checks=[self._check(
                name="Dependency Scan",
                passed=True,
                message="Dependency scan skipped - npm audit not available",
                partial=True,
            )],
        )
