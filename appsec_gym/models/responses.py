"""API response models."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

from appsec_gym.services.challenge_manager import CheckOutcome


class ToolStatus(BaseModel):
    """Availability of a single external validation tool."""

    status: Literal["available", "unavailable"]
    latency_ms: Optional[float] = None
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """System health check response.

    ``degraded`` means validation still works but some stages will only
    award partial credit.
    """

    status: Literal["healthy", "degraded"]
    version: str
    uptime_seconds: float
    tools: dict[str, ToolStatus]


class ChallengeSummary(BaseModel):
    """A catalog entry without its file contents."""

    id: str
    title: str
    category: str
    difficulty: str
    description: str
    total_hints: int


class AttemptResponse(BaseModel):
    """The active attempt."""

    attempt_id: str
    challenge_id: str
    title: str
    status: str
    workspace_path: str
    files: list[str]
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    last_score: Optional[float] = None
    last_grade: Optional[str] = None


class CheckResponse(BaseModel):
    """Result of validating the active attempt."""

    outcome: CheckOutcome
    report: Optional[str] = None
