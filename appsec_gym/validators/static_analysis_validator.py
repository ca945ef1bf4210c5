"""Static Analysis Validator — second stage of the pipeline (max 25 points).

Runs ESLint with the security plugin profile over the submitted files and
counts only diagnostics raised by security rules. If ESLint cannot be run
(not installed, crashed, timed out, unparseable output) the stage awards
half credit and marks its check as partial instead of failing the attempt.
"""

import asyncio
import json
from typing import Any, Optional

import structlog

from appsec_gym.config import get_settings
from appsec_gym.errors import ToolExecutionError
from appsec_gym.services.tool_runner import ToolRunner, split_command
from appsec_gym.services import workspace as workspace_setup
from appsec_gym.validators.base import BaseValidator, Submission
from appsec_gym.validators.models import (
    MAX_STATIC_SCORE,
    STATIC_PENALTY,
    STATIC_UNAVAILABLE_RATIO,
    IssueType,
    SecurityIssue,
    Severity,
    StageOutcome,
    partial_credit,
)
from appsec_gym.validators.rules import ESLINT_SEVERITY_ERROR, SECURITY_RULE_MARKER

logger = structlog.get_logger()


def parse_eslint_output(stdout: str) -> list[dict[str, Any]]:
    """Parse ``eslint --format json`` output into per-file reports.

    Raises ValueError when the output is empty or not an ESLint report list,
    i.e. reports that are not objects or messages that are not object lists.
    """
    if not stdout.strip():
        raise ValueError("ESLint produced no output")

    data = json.loads(stdout)
    if not isinstance(data, list):
        raise ValueError("Unexpected ESLint output format")

    for report in data:
        if not isinstance(report, dict):
            raise ValueError("Unexpected ESLint report entry")
        messages = report.get("messages") or []
        if not isinstance(messages, list) or not all(isinstance(m, dict) for m in messages):
            raise ValueError("Unexpected ESLint messages format")
    return data


def security_diagnostics(reports: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten reports to the messages raised by security rules, keeping the file path."""
    diagnostics = []
    for report in reports:
        for message in report.get("messages") or []:
            rule_id = message.get("ruleId")
            if isinstance(rule_id, str) and SECURITY_RULE_MARKER in rule_id:
                diagnostics.append({**message, "filePath": report.get("filePath")})
    return diagnostics


class StaticAnalysisValidator(BaseValidator):
    """Security-focused lint pass over the workspace files."""

    max_score = MAX_STATIC_SCORE

    def __init__(
        self,
        runner: Optional[ToolRunner] = None,
        command: Optional[str] = None,
        enabled: Optional[bool] = None,
    ):
        settings = get_settings()
        self.runner = runner or ToolRunner()
        self.command = command or settings.ESLINT_COMMAND
        self.enabled = settings.ENABLE_STATIC_ANALYSIS if enabled is None else enabled

    @property
    def name(self) -> str:
        return "StaticAnalysisValidator"

    async def evaluate(self, submission: Submission) -> StageOutcome:
        try:
            reports = await self._run_eslint(submission)
        except (ToolExecutionError, ValueError, OSError) as e:
            logger.warning("static_analysis_unavailable", challenge_id=submission.challenge_id, error=str(e))
            return self._unavailable()

        diagnostics = security_diagnostics(reports)
        count = len(diagnostics)
        score = float(MAX_STATIC_SCORE) if count == 0 else self._clamp(MAX_STATIC_SCORE - count * STATIC_PENALTY)

        issues = [
            SecurityIssue(
                type=IssueType.STATIC_ANALYSIS,
                rule=diag.get("ruleId"),
                message=diag.get("message"),
                line=diag.get("line"),
                file=diag.get("filePath"),
                severity=Severity.HIGH if diag.get("severity") == ESLINT_SEVERITY_ERROR else Severity.MEDIUM,
            )
            for diag in diagnostics
        ]

        return StageOutcome(
            score=score,
            checks=[self._check(
                name="Static Analysis (ESLint Security)",
                passed=count == 0,
                message=(
                    "No static analysis security issues found"
                    if count == 0
                    else f"Found {count} static analysis issues"
                ),
                details={"issues": count, "score": score},
            )],
            issues=issues,
            recommendations=(
                ["Resolve the ESLint security findings reported for your files"] if count else []
            ),
        )

    async def _run_eslint(self, submission: Submission) -> list[dict[str, Any]]:
        if not self.enabled:
            raise ToolExecutionError("eslint", "static analysis disabled by configuration")

        workspace = submission.workspace
        if workspace is None:
            raise ToolExecutionError("eslint", "no submitted files to analyse")

        await asyncio.to_thread(workspace_setup.prepare_workspace, workspace)

        argv = [
            *split_command(self.command),
            *(str(path) for path in submission.file_paths),
            "--format",
            "json",
        ]
        result = await self.runner.run(argv, cwd=workspace)
        return parse_eslint_output(result.stdout)

    def _unavailable(self) -> StageOutcome:
        return StageOutcome(
            score=partial_credit(MAX_STATIC_SCORE, STATIC_UNAVAILABLE_RATIO),
            checks=[self._check(
                name="Static Analysis",
                passed=False,
                message="Static analysis tools not available - partial validation only",
                partial=True,
            )],
        )
