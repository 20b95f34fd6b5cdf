"""비즈니스 로직 서비스 - export only.

VacancySearchService는 engine 계층에 의존하므로
busca_vagas.services.impl.vacancy_service 에서 직접 import 합니다.
"""

from .impl import CacheService, create_cache_service

__all__ = ["CacheService", "create_cache_service"]
