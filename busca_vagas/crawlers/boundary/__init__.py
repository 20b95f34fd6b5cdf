"""업스트림 응답 처리 (envelope 분류, 빈 객실 추출)."""

from .envelope import classify_response, parse_health_response, raise_for_status
from .vacancy_parsing import (
    ExtractionResult,
    VacancyRecord,
    extract_from_structured,
    extract_vacancies,
    resolve_raw_payload,
)

__all__ = [
    "classify_response",
    "parse_health_response",
    "raise_for_status",
    "ExtractionResult",
    "VacancyRecord",
    "extract_from_structured",
    "extract_vacancies",
    "resolve_raw_payload",
]
