"""Search Result - Standardized Result Format

Immutable result returned to callers for one date-range search.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from busca_vagas.core.exceptions import BuscaVagasException, ErrorKind
from busca_vagas.schemas.vacancy_schema import VacancySearchRequest


NO_AVAILABILITY_SUMMARY = "No vacancies found for the selected period"


class SearchStatus(str, Enum):
    """검색 상태 - has_availability의 순수 함수"""

    AVAILABLE = "AVAILABLE"
    NO_AVAILABILITY = "NO_AVAILABILITY"

    @classmethod
    def from_availability(cls, has_availability: bool) -> "SearchStatus":
        return cls.AVAILABLE if has_availability else cls.NO_AVAILABILITY


@dataclass(frozen=True)
class QueryDetails:
    """검색 요청 echo + 집계"""

    hotel_filter: str
    checkin: str
    checkout: str
    hotels_found: int = 0
    total_vacancies_found: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hotelFilter": self.hotel_filter,
            "checkin": self.checkin,
            "checkout": self.checkout,
            "hotelsFound": self.hotels_found,
            "totalVacanciesFound": self.total_vacancies_found,
        }


@dataclass(frozen=True)
class SearchResult:
    """검색 결과 표준 포맷

    Attributes:
        summary: 사람이 읽는 요약
        vacancies: "호텔: 설명" 목록 (문서 순서)
        hotel_groups: 호텔명 → 설명 목록 (호텔별 튜플)
        query_details: 요청 echo + 집계
        has_no_room_message: 응답에 "빈 객실 없음" 문구가 있었는지
    """

    summary: str
    vacancies: Tuple[str, ...] = ()
    hotel_groups: Tuple[Tuple[str, Tuple[str, ...]], ...] = ()
    query_details: Optional[QueryDetails] = None
    has_no_room_message: bool = False

    @property
    def has_availability(self) -> bool:
        return len(self.vacancies) > 0

    @property
    def status(self) -> SearchStatus:
        return SearchStatus.from_availability(self.has_availability)

    def groups(self) -> Dict[str, List[str]]:
        """호텔별 그룹 (복사본, 삽입 순서 유지)"""
        return {hotel: list(items) for hotel, items in self.hotel_groups}

    @classmethod
    def no_availability(
        cls, query_details: Optional[QueryDetails] = None, has_no_room_message: bool = False
    ) -> "SearchResult":
        """빈 객실 없음 결과 생성"""
        return cls(
            summary=NO_AVAILABILITY_SUMMARY,
            query_details=query_details,
            has_no_room_message=has_no_room_message,
        )

    def to_dict(self) -> Dict[str, Any]:
        """외부 응답용 camelCase dict"""
        return {
            "hasAvailability": self.has_availability,
            "status": self.status.value,
            "summary": self.summary,
            "vacancies": list(self.vacancies),
            "hotelGroups": self.groups(),
            "queryDetails": self.query_details.to_dict() if self.query_details else None,
        }


@dataclass(frozen=True)
class WeekendResult:
    """주말(또는 개별 기간) 1건 - 결과 또는 오류 중 하나"""

    request: VacancySearchRequest
    result: Optional[SearchResult] = None
    error_kind: Optional[ErrorKind] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.result is None

    @property
    def has_availability(self) -> bool:
        return self.result is not None and self.result.has_availability

    @classmethod
    def from_error(cls, request: VacancySearchRequest, error: BuscaVagasException) -> "WeekendResult":
        return cls(
            request=request,
            error_kind=error.kind,
            error_code=error.error_code,
            error_message=error.message,
        )


@dataclass(frozen=True)
class WeekendSearchResult:
    """주말 일괄 검색 결과"""

    weekends: Tuple[WeekendResult, ...] = ()

    @property
    def weekends_searched(self) -> int:
        return len(self.weekends)

    @property
    def weekends_with_vacancies(self) -> int:
        return sum(1 for w in self.weekends if w.has_availability)
