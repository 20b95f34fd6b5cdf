"""빈방 검색 서비스 - 비즈니스 로직 오케스트레이션"""
import asyncio
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

from pydantic import ValidationError

from busca_vagas.core.config import settings
from busca_vagas.core.exceptions import (
    ApplicationException,
    BuscaVagasException,
    ErrorKind,
    InvalidWeekendCountException,
)
from busca_vagas.core.logging import logger
from busca_vagas.crawlers.boundary.envelope import parse_health_response
from busca_vagas.crawlers.boundary.vacancy_parsing import (
    ExtractionResult,
    extract_from_structured,
    extract_vacancies,
    resolve_raw_payload,
)
from busca_vagas.crawlers.http_client import get_shared_http_client
from busca_vagas.engine import (
    CacheAdapter,
    RequestOrchestrator,
    SearchResult,
    WeekendResult,
    WeekendSearchResult,
    assemble,
)
from busca_vagas.schemas.vacancy_schema import ALL_HOTELS, Hotel, VacancySearchRequest
from busca_vagas.services.impl.cache_service import CacheService, CacheStats, create_cache_service
from busca_vagas.utils.dates import (
    DEFAULT_WEEKEND_COUNT,
    MAX_WEEKEND_COUNT,
    MIN_WEEKEND_COUNT,
    upcoming_weekends,
)


HOTEL_LIST_CACHE_KEY = "hotel-list"


def validate_weekend_count(count: Any) -> int:
    """주말 개수 검증 (1~12, 네트워크 호출 전)

    Raises:
        InvalidWeekendCountException
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidWeekendCountException(count)
    if not MIN_WEEKEND_COUNT <= count <= MAX_WEEKEND_COUNT:
        raise InvalidWeekendCountException(count)
    return count


def extract_from_data(data: Any) -> ExtractionResult:
    """검색 envelope data → 추출 결과 (원시 텍스트 우선, 없으면 구조화 결과)"""
    raw = resolve_raw_payload(data)
    if raw is not None:
        return extract_vacancies(raw)
    return extract_from_structured(data)


def _parse_hotels(data: Any) -> List[Hotel]:
    if not isinstance(data, list):
        raise ApplicationException(
            "Unexpected hotel list payload from upstream API",
            details={"type": type(data).__name__},
        )

    hotels: List[Hotel] = []
    for item in data:
        try:
            hotels.append(Hotel.model_validate(item))
        except ValidationError as e:
            logger.warning(f"[SERVICE] Skipping invalid hotel entry: {e.error_count()} error(s)")
    return hotels


class VacancySearchService:
    """
    빈방 검색 서비스 - SRP: 비즈니스 로직 조율만 담당

    - 업스트림 호출 정책은 RequestOrchestrator
    - 응답 해석은 vacancy_parsing
    - 결과 조립은 assembler
    """

    def __init__(self, orchestrator: RequestOrchestrator):
        self.orchestrator = orchestrator

    @property
    def cache_service(self) -> CacheService:
        return self.orchestrator.cache.cache_service

    async def search(self, request: VacancySearchRequest) -> SearchResult:
        """
        단일 기간 빈방 검색

        Args:
            request: 검색 요청

        Returns:
            SearchResult

        Raises:
            BuscaVagasException: 업스트림 호출 실패 (재시도 후)
        """
        query = urlencode({
            "hotel": request.hotel_filter,
            "checkin": request.checkin_iso,
            "checkout": request.checkout_iso,
        })
        logger.info(
            f"[SERVICE] Searching vacancies: hotel={request.hotel_filter}, "
            f"{request.checkin_iso} → {request.checkout_iso}"
        )

        envelope = await self.orchestrator.fetch_stage(f"/vagas/search?{query}", "search")
        result = assemble(extract_from_data(envelope.data), request)

        logger.info(f"[SERVICE] Search completed: {result.status.value} ({len(result.vacancies)} vacancies)")
        return result

    async def _search_one(self, request: VacancySearchRequest) -> WeekendResult:
        try:
            return WeekendResult(request=request, result=await self.search(request))
        except BuscaVagasException as e:
            return WeekendResult.from_error(request, e)

    async def search_many(self, requests: Sequence[VacancySearchRequest]) -> List[WeekendResult]:
        """
        독립적인 여러 기간을 동시에 검색

        한 건의 실패는 다른 검색을 취소하지 않으며, 결과는 요청 순서대로 반환됩니다.
        """
        outcomes = await asyncio.gather(
            *(self._search_one(r) for r in requests),
            return_exceptions=True,
        )

        results: List[WeekendResult] = []
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    f"[SERVICE] Unexpected error for {request.checkin_iso}: {type(outcome).__name__}: {outcome}"
                )
                results.append(WeekendResult(
                    request=request,
                    error_kind=ErrorKind.UNKNOWN,
                    error_code="UNKNOWN_ERROR",
                    error_message=str(outcome) or type(outcome).__name__,
                ))
            else:
                results.append(outcome)
        return results

    async def search_upcoming_weekends(
        self,
        count: int = DEFAULT_WEEKEND_COUNT,
        today: Optional[date] = None,
        hotel_filter: str = ALL_HOTELS,
    ) -> WeekendSearchResult:
        """다가오는 금→일 주말들을 개별 검색으로 동시에 조회"""
        validate_weekend_count(count)
        requests = [
            VacancySearchRequest(
                hotel_filter=hotel_filter,
                checkin_date=w.friday,
                checkout_date=w.sunday,
            )
            for w in upcoming_weekends(count, today)
        ]
        return WeekendSearchResult(weekends=tuple(await self.search_many(requests)))

    async def search_weekends(self, count: int = DEFAULT_WEEKEND_COUNT) -> WeekendSearchResult:
        """
        업스트림 주말 일괄 검색 (GET /vagas/search/weekends)

        Raises:
            InvalidWeekendCountException: count가 1~12 범위 밖 (네트워크 호출 없음)
            BuscaVagasException: 업스트림 호출 실패
        """
        validate_weekend_count(count)
        logger.info(f"[SERVICE] Searching {count} weekend(s)")

        envelope = await self.orchestrator.fetch_stage(
            f"/vagas/search/weekends?{urlencode({'count': count})}", "batch"
        )
        data = envelope.data if isinstance(envelope.data, dict) else {}
        entries = data.get("weekendResults") or []

        weekends: List[WeekendResult] = []
        for entry in entries:
            weekend = self._weekend_from_entry(entry)
            if weekend is not None:
                weekends.append(weekend)

        result = WeekendSearchResult(weekends=tuple(weekends))
        logger.info(
            f"[SERVICE] Weekend search completed: "
            f"{result.weekends_with_vacancies}/{result.weekends_searched} with vacancies"
        )
        return result

    def _weekend_from_entry(self, entry: Any) -> Optional[WeekendResult]:
        if not isinstance(entry, dict):
            return None
        try:
            request = VacancySearchRequest(
                hotel_filter=ALL_HOTELS,
                checkin_date=entry.get("friday") or entry.get("checkin"),
                checkout_date=entry.get("sunday") or entry.get("checkout"),
            )
        except ValidationError:
            logger.warning(f"[SERVICE] Skipping weekend entry without valid dates: {entry.get('dates')}")
            return None

        if entry.get("success") is False:
            return WeekendResult.from_error(
                request,
                ApplicationException(entry.get("error") or "Weekend search failed upstream"),
            )
        return WeekendResult(request=request, result=assemble(extract_from_data(entry), request))

    async def get_hotels(self, force_refresh: bool = False) -> List[Hotel]:
        """
        호텔 목록 (24시간 캐시)

        Args:
            force_refresh: True면 캐시 무시하고 새로 조회
        """
        data = await self.orchestrator.get_cached_or_fetch(
            HOTEL_LIST_CACHE_KEY,
            "/vagas/hoteis",
            stage="metadata",
            ttl_seconds=settings.hotel_cache_ttl,
            force_refresh=force_refresh,
            validate=_parse_hotels,
        )
        hotels = _parse_hotels(data)
        logger.info(f"[SERVICE] Retrieved {len(hotels)} hotels")
        return hotels

    async def refresh_hotels(self) -> List[Hotel]:
        return await self.get_hotels(force_refresh=True)

    async def scrape_hotels(self) -> List[Hotel]:
        """업스트림이 직접 스크랩한 호텔 목록 ('Todas' 포함, 캐시하지 않음)"""
        envelope = await self.orchestrator.fetch_stage("/vagas/hoteis/scrape", "search")
        return _parse_hotels(envelope.data)

    async def check_health(self) -> Dict[str, Any]:
        """업스트림 헬스 체크

        Raises:
            BuscaVagasException: 업스트림 응답 없음/오류
        """
        return await self.orchestrator.fetch_stage("/health", "metadata", parse=parse_health_response)

    def cache_stats(self) -> CacheStats:
        return self.cache_service.stats(HOTEL_LIST_CACHE_KEY)

    def clear_cache(self) -> int:
        return self.cache_service.clear()


_vacancy_service: Optional[VacancySearchService] = None


def get_vacancy_service() -> VacancySearchService:
    """VacancySearchService 싱글톤 (테스트에서는 dependency override로 교체)"""
    global _vacancy_service
    if _vacancy_service is None:
        orchestrator = RequestOrchestrator(
            http_client=get_shared_http_client(),
            cache=CacheAdapter(create_cache_service()),
        )
        _vacancy_service = VacancySearchService(orchestrator)
    return _vacancy_service
