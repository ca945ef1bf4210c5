"""Progress recorder — persists the latest verdict per challenge as JSON."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog
from pydantic import BaseModel, Field, ValidationError

logger = structlog.get_logger()


class ChallengeRecord(BaseModel):
    passed: bool
    score: Optional[float] = None
    grade: Optional[str] = None
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ProgressFile(BaseModel):
    challenges: dict[str, ChallengeRecord] = Field(default_factory=dict)


class ProgressRecorder:
    """Stores {passed, score, grade, checked_at} keyed by challenge id."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> ProgressFile:
        if not self.path.exists():
            return ProgressFile()
        try:
            return ProgressFile.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (ValidationError, ValueError) as e:
            logger.warning("progress_file_invalid", path=str(self.path), error=str(e))
            return ProgressFile()

    def record(
        self,
        challenge_id: str,
        passed: bool,
        score: Optional[float] = None,
        grade: Optional[str] = None,
    ) -> ChallengeRecord:
        progress = self.load()
        entry = ChallengeRecord(passed=passed, score=score, grade=grade)
        progress.challenges[challenge_id] = entry

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(progress.model_dump(mode="json"), indent=2) + "\n",
            encoding="utf-8",
        )
        logger.info("progress_recorded", challenge_id=challenge_id, passed=passed, score=score)
        return entry

    def get(self, challenge_id: str) -> Optional[ChallengeRecord]:
        return self.load().challenges.get(challenge_id)

    def completed_ids(self) -> list[str]:
        return [cid for cid, entry in self.load().challenges.items() if entry.passed]
