"""Top level API router registration."""
from fastapi import APIRouter, FastAPI

from prestige.api.routes import admin, auth, companies, comparisons, health, votes


def register_routes(application: FastAPI) -> None:
    """Register all API routers with the FastAPI application."""
    api_router = APIRouter(prefix="/api")

    api_router.include_router(health.router, tags=["health"])
    api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
    api_router.include_router(comparisons.router, tags=["comparisons"])
    api_router.include_router(votes.router, tags=["votes"])
    api_router.include_router(companies.router, tags=["companies"])
    api_router.include_router(admin.router, tags=["admin"])

    application.include_router(api_router)


__all__ = ["register_routes"]
