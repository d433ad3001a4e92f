from fastapi import APIRouter

from apt_ranker.api.v1 import cache, health, recommendations, regions, sources

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(recommendations.router, prefix="/recommendations", tags=["recommendations"])
api_router.include_router(regions.router, prefix="/regions", tags=["regions"])
api_router.include_router(sources.router, prefix="/sources", tags=["sources"])
api_router.include_router(cache.router, prefix="/cache", tags=["cache"])
