"""헬스 체크 엔드포인트"""
from datetime import datetime

from fastapi import APIRouter, Depends

from busca_vagas import __version__
from busca_vagas.core.exceptions import BuscaVagasException
from busca_vagas.core.logging import logger
from busca_vagas.schemas.vacancy_schema import HealthResponse
from busca_vagas.services.impl.vacancy_service import VacancySearchService, get_vacancy_service

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(service: VacancySearchService = Depends(get_vacancy_service)):
    """
    헬스 체크 엔드포인트

    - 업스트림 스크래퍼 API 상태
    - 캐시 저장소 상태
    """
    upstream_ok = False

    try:
        await service.check_health()
        upstream_ok = True
    except BuscaVagasException as e:
        logger.warning(f"[API] Upstream health check failed: {e.error_code}")

    cache_ok = service.cache_service.health_check()

    status = "ok" if upstream_ok and cache_ok else ("degraded" if upstream_ok or cache_ok else "error")

    return HealthResponse(
        status=status,
        timestamp=datetime.now(),
        version=__version__,
        upstream="ok" if upstream_ok else "unavailable",
        cache_backend=service.cache_service.backend,
    )


@router.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": "제휴 호텔 빈방 검색 서비스",
        "version": __version__,
        "docs": "/docs"
    }
