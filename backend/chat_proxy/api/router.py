"""Root API router wiring."""

from fastapi import APIRouter

from chat_proxy.api import generation, health


api_router = APIRouter(prefix="/api")
api_router.include_router(health.router)
api_router.include_router(generation.router)
