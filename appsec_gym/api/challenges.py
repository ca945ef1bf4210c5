"""Challenges API — catalog, start an attempt, current attempt, check solution."""

from fastapi import APIRouter, Request

import structlog

from appsec_gym.errors import NoActiveChallengeError
from appsec_gym.models.challenge import Attempt
from appsec_gym.models.responses import AttemptResponse, ChallengeSummary, CheckResponse
from appsec_gym.services.challenge_manager import ChallengeManager
from appsec_gym.validators.report import format_report

logger = structlog.get_logger()

router = APIRouter()


def _manager(request: Request) -> ChallengeManager:
    return request.app.state.challenge_manager


def _attempt_response(attempt: Attempt) -> AttemptResponse:
    return AttemptResponse(
        attempt_id=attempt.attempt_id,
        challenge_id=attempt.challenge.id,
        title=attempt.challenge.title,
        status=attempt.status,
        workspace_path=str(attempt.workspace_path),
        files=[str(p) for p in attempt.file_paths],
        started_at=attempt.started_at,
        completed_at=attempt.completed_at,
        last_score=attempt.last_score,
        last_grade=attempt.last_grade,
    )


@router.get("/challenges", response_model=list[ChallengeSummary])
async def list_challenges(request: Request):
    """All built-in challenges in training order."""
    return [
        ChallengeSummary(
            id=c.id,
            title=c.title,
            category=c.category,
            difficulty=c.difficulty,
            description=c.description,
            total_hints=len(c.hints),
        )
        for c in _manager(request).list_challenges()
    ]


@router.post("/challenges/{challenge_id}/start", response_model=AttemptResponse, status_code=201)
async def start_challenge(challenge_id: str, request: Request):
    """Scaffold the challenge files and begin a new attempt."""
    attempt = _manager(request).start_challenge(challenge_id)
    return _attempt_response(attempt)


@router.get("/attempt", response_model=AttemptResponse)
async def current_attempt(request: Request):
    """The active attempt, if any."""
    attempt = _manager(request).get_current_attempt()
    if attempt is None:
        raise NoActiveChallengeError()
    return _attempt_response(attempt)


@router.post("/check", response_model=CheckResponse)
async def check_solution(request: Request):
    """Validate the active attempt's files."""
    outcome = await _manager(request).check_solution()
    logger.info("check_requested", challenge_id=outcome.challenge_id, passed=outcome.passed)
    return CheckResponse(
        outcome=outcome,
        report=format_report(outcome.result) if outcome.result else None,
    )
