"""Base validator — abstract class implementing the Strategy Pattern.

Each validator is a standalone, independently testable stage of the
validation pipeline. New stages are added without modifying the engine.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from appsec_gym.validators.models import StageOutcome, ValidationCheck


class Submission(BaseModel):
    """What the engine validates: one attempt's files and their text."""

    challenge_id: str
    category: str
    file_paths: list[Path] = Field(default_factory=list)
    content: str = ""

    @property
    def workspace(self) -> Optional[Path]:
        """Directory holding the submitted files (parent of the first path)."""
        if not self.file_paths:
            return None
        return Path(self.file_paths[0]).parent


class BaseValidator(ABC):
    """Abstract base for all validation stages.

    Contract:
        - evaluate() returns a StageOutcome whose score lies in [0, max_score]
        - evaluate() recovers from tool failures itself (partial credit)
        - anything else it raises is treated as an orchestration error
    """

    max_score: int = 0

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging."""
        ...

    @abstractmethod
    async def evaluate(self, submission: Submission) -> StageOutcome:
        """Run this stage against a submission."""
        ...

    # ── Helper Methods ──

    def _clamp(self, score: float) -> float:
        return max(0.0, min(float(score), float(self.max_score)))

    def _check(
        self,
        name: str,
        passed: bool,
        message: str,
        details: Optional[dict] = None,
        partial: bool = False,
    ) -> ValidationCheck:
        """Convenience method to create a ValidationCheck."""
        return ValidationCheck(
            name=name,
            passed=passed,
            message=message,
            details=details,
            partial=partial,
        )
