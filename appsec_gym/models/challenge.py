"""Challenge and attempt models."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class FileSpec(BaseModel):
    """A file scaffolded into the workspace when a challenge starts."""

    name: str
    content: str


class Challenge(BaseModel):
    """One vulnerable-code exercise."""

    id: str
    category: str
    title: str
    difficulty: Difficulty = Difficulty.BEGINNER
    description: str = ""
    files: list[FileSpec] = Field(default_factory=list)
    hints: list[str] = Field(default_factory=list)
    learning_objectives: list[str] = Field(default_factory=list)
    attack_vectors: list[str] = Field(default_factory=list)

    model_config = {"use_enum_values": True}


class AttemptStatus(str, Enum):
    """Lifecycle of one attempt: not_started → in_progress → completed."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Attempt(BaseModel):
    """A user's pass through a single challenge. Restarting creates a new attempt."""

    attempt_id: str
    challenge: Challenge
    status: AttemptStatus = AttemptStatus.NOT_STARTED
    workspace_path: Path
    file_paths: list[Path] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    checks_run: int = 0
    hints_used: int = 0
    last_score: Optional[float] = None
    last_grade: Optional[str] = None

    model_config = {"use_enum_values": True, "validate_assignment": True}
