"""AppSec Gym — HTTP API.

FastAPI application exposing the challenge catalog, attempt lifecycle and
solution checks, with lifespan management and global error handling.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from appsec_gym import __version__
from appsec_gym.api.router import api_router
from appsec_gym.config import get_settings
from appsec_gym.errors import ChallengeNotFoundError, NoActiveChallengeError
from appsec_gym.logging_setup import configure_logging
from appsec_gym.services.challenge_manager import ChallengeManager
from appsec_gym.services.tool_runner import ToolRunner

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    settings = get_settings()

    # ── Startup ──
    logger.info("app_starting", debug=settings.DEBUG, workspace=str(settings.workspace_path))

    if getattr(app.state, "tool_runner", None) is None:
        app.state.tool_runner = ToolRunner()

    # Tests install their own manager before the app starts
    if getattr(app.state, "challenge_manager", None) is None:
        app.state.challenge_manager = ChallengeManager()

    logger.info("app_started")

    yield

    # ── Shutdown ──
    logger.info("app_stopped")


# ── Create Application ──

app = FastAPI(
    title="AppSec Gym",
    description=(
        "Hands-on application security training. "
        "Fix vulnerable code and have it graded by pattern analysis, "
        "ESLint security rules and npm audit."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ── Global Exception Handlers ──

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all error handler for unhandled exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again.",
        },
    )


@app.exception_handler(ChallengeNotFoundError)
async def challenge_not_found_handler(request: Request, exc: ChallengeNotFoundError):
    return JSONResponse(
        status_code=404,
        content={"error": "challenge_not_found", "message": str(exc)},
    )


@app.exception_handler(NoActiveChallengeError)
async def no_active_challenge_handler(request: Request, exc: NoActiveChallengeError):
    return JSONResponse(
        status_code=409,
        content={"error": "no_active_challenge", "message": str(exc)},
    )


# ── Routes ──

app.include_router(api_router, prefix="/api/v1")


# ── Root endpoint ──

@app.get("/")
async def root():
    """Root endpoint — API info."""
    return {
        "name": "AppSec Gym",
        "version": __version__,
        "description": "Hands-on application security training",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
