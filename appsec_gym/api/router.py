"""Main API router — combines all endpoint routers."""

from fastapi import APIRouter

from appsec_gym.api.challenges import router as challenges_router
from appsec_gym.api.health import router as health_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])

# Catalog, attempts and checks
api_router.include_router(challenges_router, tags=["Challenges"])
