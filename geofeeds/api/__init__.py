from __future__ import annotations

from fastapi import APIRouter

from .health import router as health_router
from .feeds import router as feeds_router
from .layers import router as layers_router
from .map import router as map_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(feeds_router)
api_router.include_router(layers_router)
api_router.include_router(map_router)
