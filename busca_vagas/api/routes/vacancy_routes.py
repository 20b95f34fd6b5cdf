"""Vacancy Routes - HTTP Layer

HTTP Layer가 서비스 계층으로 요청을 위임하는 단순한 Translator 역할만 수행합니다.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError

from busca_vagas.core.exceptions import BuscaVagasException, UserAction
from busca_vagas.core.logging import logger
from busca_vagas.engine import SearchResult, WeekendSearchResult
from busca_vagas.schemas.vacancy_schema import (
    ALL_HOTELS,
    CacheStatsResponse,
    HotelListResponse,
    QueryDetailsData,
    VacancyResultData,
    VacancySearchRequest,
    VacancySearchResponse,
    WeekendEntryData,
    WeekendSearchResponse,
)
from busca_vagas.services.impl.vacancy_service import (
    HOTEL_LIST_CACHE_KEY,
    VacancySearchService,
    get_vacancy_service,
)
from busca_vagas.utils.dates import DEFAULT_WEEKEND_COUNT

router = APIRouter(prefix="/api/v1", tags=["vacancies"])


def to_result_data(result: SearchResult) -> VacancyResultData:
    details = result.query_details
    return VacancyResultData(
        has_availability=result.has_availability,
        status=result.status.value,
        summary=result.summary,
        vacancies=list(result.vacancies),
        hotel_groups=result.groups(),
        query_details=QueryDetailsData(
            hotel_filter=details.hotel_filter,
            checkin=details.checkin,
            checkout=details.checkout,
            hotels_found=details.hotels_found,
            total_vacancies_found=details.total_vacancies_found,
        ),
    )


def to_weekend_response(result: WeekendSearchResult) -> WeekendSearchResponse:
    entries = []
    for weekend in result.weekends:
        entries.append(WeekendEntryData(
            checkin=weekend.request.checkin_iso,
            checkout=weekend.request.checkout_iso,
            result=to_result_data(weekend.result) if weekend.result is not None else None,
            error_code=weekend.error_code,
            error_message=weekend.error_message,
        ))

    return WeekendSearchResponse(
        status="success",
        weekends_searched=result.weekends_searched,
        weekends_with_vacancies=result.weekends_with_vacancies,
        weekends=entries,
        message=f"Found vacancies in {result.weekends_with_vacancies} of {result.weekends_searched} weekend(s)",
    )


@router.get("/hotels", response_model=HotelListResponse)
async def list_hotels(
    refresh: bool = Query(False, description="캐시를 무시하고 새로 조회"),
    service: VacancySearchService = Depends(get_vacancy_service),
):
    """호텔 목록 (24시간 캐시)"""
    try:
        hotels = await service.get_hotels(force_refresh=refresh)
    except BuscaVagasException as e:
        logger.warning(f"[API] Hotel list failed: {e.error_code}")
        return HotelListResponse(status="error", message=e.message, error_code=e.error_code)

    return HotelListResponse(status="success", data=hotels, message=f"{len(hotels)} hotel(s)")


@router.get("/vacancies/search", response_model=VacancySearchResponse)
async def search_vacancies(
    checkin: date = Query(..., description="체크인 (YYYY-MM-DD)"),
    checkout: date = Query(..., description="체크아웃 (YYYY-MM-DD)"),
    hotel: str = Query(ALL_HOTELS, max_length=100, description="호텔 ID ('-1' = 전체)"),
    service: VacancySearchService = Depends(get_vacancy_service),
):
    """
    빈방 검색 API

    Flow:
        1. 요청 검증 (날짜 순서, 호텔 필터)
        2. 서비스에 위임 (Orchestrator → Extractor → Assembler)
        3. 결과를 HTTP Response로 변환
    """
    try:
        request = VacancySearchRequest(hotel_filter=hotel, checkin_date=checkin, checkout_date=checkout)
    except ValidationError as e:
        logger.warning(f"[API] Input validation failed: {e.error_count()} error(s)")
        return VacancySearchResponse(
            status="error",
            message=f"입력 검증 실패: {e.errors()[0]['msg']}",
            error_code="VALIDATION_ERROR",
            user_action=UserAction.TRY_AGAIN.value,
        )

    try:
        result = await service.search(request)
    except BuscaVagasException as e:
        return VacancySearchResponse(
            status="error",
            message=e.message,
            error_code=e.error_code,
            user_action=e.user_action.value,
        )

    return VacancySearchResponse(
        status="success",
        data=to_result_data(result),
        message=result.summary,
        user_action=None if result.has_availability else UserAction.NO_RESULTS.value,
    )


@router.get("/vacancies/weekends", response_model=WeekendSearchResponse)
async def search_weekend_vacancies(
    count: int = Query(DEFAULT_WEEKEND_COUNT, description="주말 개수 (1~12)"),
    parallel: bool = Query(False, description="True면 주말마다 개별 검색을 동시에 실행"),
    service: VacancySearchService = Depends(get_vacancy_service),
):
    """주말(금→일) 일괄 빈방 검색"""
    try:
        if parallel:
            result = await service.search_upcoming_weekends(count)
        else:
            result = await service.search_weekends(count)
    except BuscaVagasException as e:
        return WeekendSearchResponse(
            status="error",
            message=e.message,
            error_code=e.error_code,
            user_action=e.user_action.value,
        )

    return to_weekend_response(result)


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(service: VacancySearchService = Depends(get_vacancy_service)):
    """호텔 목록 캐시 상태"""
    stats = service.cache_stats()
    return CacheStatsResponse(
        key=HOTEL_LIST_CACHE_KEY,
        backend=service.cache_service.backend,
        **stats.to_dict(),
    )


@router.delete("/cache")
async def clear_cache(service: VacancySearchService = Depends(get_vacancy_service)):
    """캐시 전체 삭제"""
    removed = service.clear_cache()
    logger.info(f"[API] Cache cleared: {removed} entries")
    return {"status": "success", "removed": removed}
