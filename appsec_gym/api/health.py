"""Health check endpoint."""

import time

from fastapi import APIRouter, Request

from appsec_gym import __version__
from appsec_gym.models.responses import HealthResponse, ToolStatus
from appsec_gym.services.tool_runner import probe_security_tools

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Service health with external tool availability."""
    start = time.time()
    available = await probe_security_tools(getattr(request.app.state, "tool_runner", None))
    latency = round((time.time() - start) * 1000, 2)

    tools = {
        name: ToolStatus(
            status="available" if ok else "unavailable",
            latency_ms=latency,
            message=None if ok else "Stage will award partial credit",
        )
        for name, ok in available.items()
    }

    return HealthResponse(
        status="healthy" if all(available.values()) else "degraded",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        tools=tools,
    )
