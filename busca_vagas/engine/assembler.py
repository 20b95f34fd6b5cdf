"""Result Assembler - extraction output + request metadata → SearchResult"""

from busca_vagas.crawlers.boundary.vacancy_parsing import ExtractionResult
from busca_vagas.schemas.vacancy_schema import VacancySearchRequest

from .result import NO_AVAILABILITY_SUMMARY, QueryDetails, SearchResult


def build_summary(hotel_names: list[str]) -> str:
    """"Found vacancies in N hotel(s): A, B" 형태의 요약"""
    if not hotel_names:
        return NO_AVAILABILITY_SUMMARY
    return f"Found vacancies in {len(hotel_names)} hotel(s): {', '.join(hotel_names)}"


def assemble(extraction: ExtractionResult, request: VacancySearchRequest) -> SearchResult:
    """추출 결과를 최종 SearchResult로 조립 (순수 함수, 예외 없음)

    Args:
        extraction: 추출기 결과
        request: 검색 요청

    Returns:
        SearchResult
    """
    hotel_groups = tuple(
        (hotel, tuple(items)) for hotel, items in extraction.hotel_groups.items() if items
    )
    vacancies = tuple(extraction.vacancies)

    query_details = QueryDetails(
        hotel_filter=request.hotel_filter,
        checkin=request.checkin_iso,
        checkout=request.checkout_iso,
        hotels_found=len(hotel_groups),
        total_vacancies_found=len(vacancies),
    )

    if not vacancies:
        return SearchResult.no_availability(
            query_details=query_details,
            has_no_room_message=extraction.has_no_room_message,
        )

    return SearchResult(
        summary=build_summary([hotel for hotel, _ in hotel_groups]),
        vacancies=vacancies,
        hotel_groups=hotel_groups,
        query_details=query_details,
        has_no_room_message=extraction.has_no_room_message,
    )
