"""Validation Engine — runs all validation stages, computes score, produces result.

This is the main entry point for solution validation. Stages run one after
another in a fixed order (pattern → static analysis → dependency audit) so
the issue order in reports is stable.

Usage:
    engine = ValidationEngine()
    result = await engine.validate(challenge, file_paths, content)
    if not result.passed:
        # Show the report and let the user keep editing
"""

import time
from pathlib import Path
from typing import Optional, Sequence, Union

import structlog

from appsec_gym.models.challenge import Challenge
from appsec_gym.services.tool_runner import ToolRunner
from appsec_gym.validators.base import BaseValidator, Submission
from appsec_gym.validators.dependency_validator import DependencyValidator
from appsec_gym.validators.models import StageOutcome, ValidationResult
from appsec_gym.validators.pattern_validator import PatternValidator
from appsec_gym.validators.static_analysis_validator import StaticAnalysisValidator

logger = structlog.get_logger()


class ValidationEngine:
    """Orchestrates the validation stages and produces a unified result.

    Design principles:
        - Deterministic: same input and tool output → same result
        - Degrades: tool failures cost partial credit, never the verdict
        - Contained: an unexpected stage error becomes a failing check
        - Observable: logs every run with per-stage timing
    """

    def __init__(
        self,
        validators: Optional[list[BaseValidator]] = None,
        runner: Optional[ToolRunner] = None,
    ):
        """Initialize with the default stages or a custom list.

        Args:
            validators: Optional list of stages. If None, uses all defaults.
            runner: Tool runner shared by the default tool-backed stages.
        """
        self.validators = validators if validators is not None else self._default_validators(runner)

    @staticmethod
    def _default_validators(runner: Optional[ToolRunner] = None) -> list[BaseValidator]:
        """Create the default stage chain in execution order."""
        runner = runner or ToolRunner()
        return [
            PatternValidator(),                       # 60 points
            StaticAnalysisValidator(runner=runner),   # 25 points
            DependencyValidator(runner=runner),       # 15 points
        ]

    async def validate(
        self,
        challenge: Union[Challenge, dict],
        file_paths: Sequence[Union[str, Path]],
        content: str,
    ) -> ValidationResult:
        """Validate one attempt's files.

        Args:
            challenge: The challenge being attempted (model or dict with id/category)
            file_paths: Absolute paths of the submitted files, main file first
            content: Concatenated text of all submitted files

        Returns:
            ValidationResult with score, grade, checks and issues
        """
        if isinstance(challenge, dict):
            challenge_id = str(challenge.get("id", ""))
            category = str(challenge.get("category", ""))
        else:
            challenge_id = challenge.id
            category = challenge.category

        submission = Submission(
            challenge_id=challenge_id,
            category=category,
            file_paths=[Path(p) for p in file_paths],
            content=content,
        )
        return await self.validate_submission(submission)

    async def validate_submission(self, submission: Submission) -> ValidationResult:
        start_time = time.perf_counter()
        outcomes: list[StageOutcome] = []
        stage_timings: dict[str, float] = {}
        error: Optional[str] = None

        for validator in self.validators:
            v_start = time.perf_counter()
            try:
                outcome = await validator.evaluate(submission)
                outcome.score = validator._clamp(outcome.score)
                outcomes.append(outcome)
            except Exception as e:
                logger.error(
                    "validator_failed",
                    validator=validator.name,
                    challenge_id=submission.challenge_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                # Keep the partial score, skip the remaining stages
                error = str(e) or type(e).__name__
                break
            finally:
                stage_timings[validator.name] = round((time.perf_counter() - v_start) * 1000, 2)

        result = ValidationResult.build(outcomes, error=error)

        logger.info(
            "validation_complete",
            challenge_id=submission.challenge_id,
            category=submission.category,
            passed=result.passed,
            score=result.score,
            grade=result.grade,
            issues=len(result.security_issues),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            stage_timings=stage_timings,
        )

        return result

    def add_validator(self, validator: BaseValidator) -> None:
        """Append a custom stage to the chain."""
        self.validators.append(validator)

    def remove_validator(self, validator_name: str) -> None:
        """Remove a stage by name."""
        self.validators = [v for v in self.validators if v.name != validator_name]
