"""API routes package."""

from .health_routes import router as health_router
from .vacancy_routes import router as vacancy_router

__all__ = ["health_router", "vacancy_router"]
