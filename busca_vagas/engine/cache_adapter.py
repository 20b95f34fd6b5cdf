"""Cache Adapter - async 인터페이스 + 오류 격리"""

from typing import Any, Optional

from busca_vagas.core.exceptions import CacheException
from busca_vagas.core.logging import logger
from busca_vagas.services.impl.cache_service import CacheService


class CacheAdapter:
    """Cache 서비스 어댑터

    CacheService를 RequestOrchestrator가 기대하는 async 인터페이스로 변환합니다.
    캐시 실패는 로깅만 하고 호출을 실패시키지 않습니다 (미스로 취급).
    """

    def __init__(self, cache_service: Optional[CacheService] = None):
        """
        Args:
            cache_service: CacheService 인스턴스 (없으면 메모리 저장소로 내부 생성)
        """
        if cache_service is None:
            self.cache_service = CacheService()
        else:
            self.cache_service = cache_service

    async def get(self, key: str) -> Optional[Any]:
        """캐시 조회

        Returns:
            저장된 값 또는 None. 모든 캐시 예외는 로깅 후 None 반환
        """
        if not key or not isinstance(key, str):
            logger.warning(f"Invalid key for cache.get: {key}")
            return None

        try:
            return self.cache_service.get(key)
        except CacheException as e:
            logger.warning(f"Cache get failed: {type(e).__name__}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """캐시 저장

        Returns:
            bool: 저장 성공 여부 (실패해도 예외를 던지지 않음)
        """
        if not key or not isinstance(key, str):
            logger.warning(f"Invalid key for cache.set: {key}")
            return False

        try:
            return self.cache_service.set(key, value, ttl)
        except (CacheException, ValueError) as e:
            logger.warning(f"Cache set failed: {type(e).__name__}: {e}")
            return False

    async def invalidate(self, key: str) -> bool:
        try:
            return self.cache_service.invalidate(key)
        except CacheException as e:
            logger.warning(f"Cache invalidate failed: {type(e).__name__}: {e}")
            return False
