"""API router aggregation."""

from fastapi import APIRouter

from src.api.health import router as health_router
from src.api.interpretation import router as interpretation_router
from src.api.sessions import router as sessions_router

api_router = APIRouter()
api_router.include_router(health_router)
# Natural-language interpretation endpoints
api_router.include_router(interpretation_router)
# Decision session wizard endpoints
api_router.include_router(sessions_router)
