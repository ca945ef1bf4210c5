"""Challenge manager — attempt lifecycle, workspace scaffolding and solution checks.

State machine for one attempt:

    not_started ──start──▶ in_progress ──check (passed)──▶ completed
                              ▲     │
                              └─────┘ check (failed)

``completed`` is terminal; starting the challenge again creates a new attempt.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog
from pydantic import BaseModel, ValidationError

from appsec_gym.challenges.catalog import get_all_challenges, get_challenge, next_challenge
from appsec_gym.config import get_settings
from appsec_gym.errors import ChallengeNotFoundError, NoActiveChallengeError
from appsec_gym.models.challenge import Attempt, AttemptStatus, Challenge
from appsec_gym.services.progress import ProgressRecorder
from appsec_gym.validators.engine import ValidationEngine
from appsec_gym.validators.legacy import LegacyValidator
from appsec_gym.validators.models import ValidationResult
from appsec_gym.validators.registry import PatternRuleRegistry, default_registry

logger = structlog.get_logger()

STATE_FILE = ".current.json"
ATTEMPT_DIR = "current"


class CheckOutcome(BaseModel):
    """What a ``check`` returns to the CLI or API."""

    challenge_id: str
    attempt_id: str
    passed: bool
    message: str
    status: AttemptStatus
    result: Optional[ValidationResult] = None
    degraded: bool = False

    model_config = {"use_enum_values": True}


class Hint(BaseModel):
    hint: str
    hint_number: int
    total_hints: int


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _attempt_id() -> str:
    return f"att_{uuid.uuid4().hex[:8]}"


class ChallengeManager:
    """Owns the active attempt for one workspace."""

    def __init__(
        self,
        workspace_path: Optional[Path] = None,
        engine: Optional[ValidationEngine] = None,
        legacy: Optional[LegacyValidator] = None,
        progress: Optional[ProgressRecorder] = None,
        registry: Optional[PatternRuleRegistry] = None,
    ):
        settings = get_settings()
        self.workspace_path = Path(workspace_path or settings.workspace_path)
        self.state_path = self.workspace_path / STATE_FILE
        self.engine = engine or ValidationEngine()
        self.legacy = legacy or LegacyValidator()
        self.progress = progress or ProgressRecorder(settings.progress_path)

        # Catalog categories that silently use the default rules
        (registry or default_registry).warn_unmapped(c.category for c in get_all_challenges())

        self.current: Optional[Attempt] = self._load_state()

    # ── State persistence ──

    def _load_state(self) -> Optional[Attempt]:
        if not self.state_path.exists():
            return None
        try:
            return Attempt.model_validate_json(self.state_path.read_text(encoding="utf-8"))
        except (ValidationError, ValueError) as e:
            logger.warning("attempt_state_invalid", path=str(self.state_path), error=str(e))
            return None

    def _save_state(self) -> None:
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        self.state_path.write_text(self.current.model_dump_json(indent=2), encoding="utf-8")

    # ── Catalog ──

    def list_challenges(self) -> list[Challenge]:
        return get_all_challenges()

    def get_current_attempt(self) -> Optional[Attempt]:
        return self.current

    def _require_active(self) -> Attempt:
        if self.current is None:
            raise NoActiveChallengeError()
        if self.current.status != AttemptStatus.IN_PROGRESS:
            raise NoActiveChallengeError(
                f"Challenge {self.current.challenge.id} is already completed - start it again or move on"
            )
        return self.current

    # ── Lifecycle ──

    def start_challenge(self, challenge_id: str) -> Attempt:
        """Scaffold the challenge files and begin a fresh attempt."""
        challenge = get_challenge(challenge_id)
        if challenge is None:
            raise ChallengeNotFoundError(challenge_id)

        attempt_dir = self.workspace_path / ATTEMPT_DIR
        attempt_dir.mkdir(parents=True, exist_ok=True)

        file_paths = []
        for file_spec in challenge.files:
            path = attempt_dir / file_spec.name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(file_spec.content, encoding="utf-8")
            file_paths.append(path.resolve())

        self.current = Attempt(
            attempt_id=_attempt_id(),
            challenge=challenge,
            status=AttemptStatus.IN_PROGRESS,
            workspace_path=attempt_dir.resolve(),
            file_paths=file_paths,
            started_at=_now(),
        )
        self._save_state()

        logger.info("challenge_started", challenge_id=challenge_id, attempt_id=self.current.attempt_id)
        return self.current

    def move_to_next(self) -> Optional[Attempt]:
        """Start the challenge after the current one, or return None at the end."""
        if self.current is None:
            return None
        following = next_challenge(self.current.challenge.id)
        if following is None:
            return None
        return self.start_challenge(following.id)

    def get_hint(self, hint_number: int = 1) -> Hint:
        attempt = self._require_active()
        hints = attempt.challenge.hints or ["No hints available for this challenge."]
        index = min(max(hint_number, 1), len(hints)) - 1

        attempt.hints_used += 1
        self._save_state()

        return Hint(hint=hints[index], hint_number=index + 1, total_hints=len(hints))

    # ── Checking ──

    async def read_submission(self) -> tuple[list[Path], str]:
        """Read every file of the active attempt. Missing or unreadable files count as empty."""
        attempt = self._require_active()
        contents = []
        for path in attempt.file_paths:
            try:
                contents.append(await asyncio.to_thread(Path(path).read_text, encoding="utf-8"))
            except FileNotFoundError:
                logger.warning("submitted_file_missing", path=str(path))
                contents.append("")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("submitted_file_unreadable", path=str(path), error=str(e))
                contents.append("")
        return list(attempt.file_paths), "\n".join(contents)

    async def check_solution(self) -> CheckOutcome:
        """Validate the active attempt and advance its state."""
        attempt = self._require_active()
        file_paths, content = await self.read_submission()
        attempt.checks_run += 1

        try:
            result = await self.engine.validate(attempt.challenge, file_paths, content)
        except Exception as e:
            logger.error(
                "validation_engine_failed",
                challenge_id=attempt.challenge.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            verdict = self.legacy.check(attempt.challenge.id, content)
            self._finish_check(attempt, verdict.passed, None, None)
            return CheckOutcome(
                challenge_id=attempt.challenge.id,
                attempt_id=attempt.attempt_id,
                passed=verdict.passed,
                message=f"{verdict.message} (validation could only be partially performed)",
                status=attempt.status,
                degraded=True,
            )

        self._finish_check(attempt, result.passed, result.score, result.grade)
        message = (
            f"Passed with {result.score:g}/{result.max_score} ({result.grade})"
            if result.passed
            else f"Not yet: {result.score:g}/{result.max_score} ({result.grade}) - 80 needed to pass"
        )
        return CheckOutcome(
            challenge_id=attempt.challenge.id,
            attempt_id=attempt.attempt_id,
            passed=result.passed,
            message=message,
            status=attempt.status,
            result=result,
        )

    def _finish_check(
        self,
        attempt: Attempt,
        passed: bool,
        score: Optional[float],
        grade: Optional[str],
    ) -> None:
        attempt.last_score = score
        attempt.last_grade = grade
        if passed:
            attempt.status = AttemptStatus.COMPLETED
            attempt.completed_at = _now()
        self._save_state()
        self.progress.record(attempt.challenge.id, passed=passed, score=score, grade=grade)
