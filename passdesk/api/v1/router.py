"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from passdesk.api.v1.dependencies (no manual store/service construction).
"""

from fastapi import APIRouter

from passdesk.api.v1.endpoints import exports, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(exports.router, prefix="/exports", tags=["exports"])
