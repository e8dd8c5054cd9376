from fastapi import APIRouter
from litterwarden.api.v1 import health, leaderboard, reports
from litterwarden.core.config import settings

api_router = APIRouter(prefix=settings.API_V1_PREFIX)

api_router.include_router(health.router, tags=['health'])
api_router.include_router(reports.router)
api_router.include_router(leaderboard.router)
