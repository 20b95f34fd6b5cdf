"""API 엔드포인트 패키지 - export only."""

from .routes import health_router, vacancy_router

__all__ = ["health_router", "vacancy_router"]
