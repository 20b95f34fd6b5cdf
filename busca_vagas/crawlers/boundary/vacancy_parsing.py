"""업스트림 검색 응답 - 빈 객실(vacancy) 추출 유틸.

이 모듈은 네트워크(fetch)와 분리된 순수 파싱 로직을 담습니다.
어떤 입력에도 예외를 던지지 않으며, 최악의 경우 NO_AVAILABILITY(빈 결과)를 반환합니다.

처리 순서:
1. 호텔 섹션 분리 (<div class="cc_tit">), 머리말에 "빈 객실 없음" 문구가 있으면 즉시 종료
2. "빈 객실 없음" 문구가 있는 섹션은 건너뜀 (다른 호텔 섹션은 계속 처리)
3. 섹션별 매처 적용 (모든 매처가 실행되고, 같은 날짜 줄이면 가장 긴 라벨을 채택)
4. 정제 → 중복 제거 → 최소 길이 검사 → 호텔별 그룹화 (문서 순서 유지)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from busca_vagas.core.logging import logger
from busca_vagas.utils.text import clean_fragment


NO_ROOM_PHRASE = "No período escolhido não há nenhum quarto disponível"
UNKNOWN_HOTEL = "Unknown Hotel"

# 이보다 짧은 설명은 노이즈로 취급
MIN_VACANCY_LENGTH = 10

_NO_ROOM_RE = re.compile(r"\s+".join(re.escape(w) for w in NO_ROOM_PHRASE.split()), re.IGNORECASE)

_SECTION_SPLIT_RE = re.compile(r"""<div\s+class\s*=\s*["']cc_tit["']\s*>""", re.IGNORECASE)

_HOTEL_NAME_RE = re.compile(r"^([^<]+)<")

# 라벨과 날짜 줄 사이, 날짜 줄 사이에 올 수 있는 공백/태그
_SEPARATOR = r"(?:\s|<[^>]*>)*"

_CAPACITY = r"\(\s*até\s+\d+\s+pessoas?\s*\)"

# "27/10 - 29/10 (2 dias livres) - 1 Quarto(s) - adaptado"
_DATE_LINE_RE = re.compile(
    _SEPARATOR
    + r"(\d{1,2}/\d{1,2}\s*-\s*\d{1,2}/\d{1,2}\s*\(\s*\d+\s+dias?\s+livres?\s*\)"
    r"\s*-\s*\d+\s+Quarto\(s\)(?:\s*-\s*adaptado)?)",
    re.IGNORECASE,
)

_NAMED_HEADER_RE = re.compile(
    r"(?<!\w)((?:BLUES\s+)?(?:Triplo|Duplo|Apartamento|Chalé|Homem\s+de\s+Melo|Perdizes|Sumaré)"
    r"(?:\s+(?:Luxo|PcD))?|BLUES(?:\s+(?:Luxo|PcD))?)\s*" + _CAPACITY,
    re.IGNORECASE,
)

# 한 줄 안의 대문자로 시작하는 라벨 (줄 시작 또는 태그 직후)
_GENERAL_HEADER_RE = re.compile(
    r"(?:^|(?<=>))[ \t]*([A-ZÀ-Ý][A-Za-zÀ-ÿ]*(?:[ \t]+[A-Za-zÀ-ÿ]+)*)[ \t]*" + _CAPACITY,
    re.MULTILINE,
)

# 날짜 범위와 "- M Quarto(s)" 사이에 임의의 텍스트를 허용하는 느슨한 형태
_LOOSE_LISTING_RE = re.compile(
    r"(?<!\w)([A-ZÀ-Ý][A-Za-zÀ-ÿ]*(?:[ \t]+[A-Za-zÀ-ÿ]+)*)\s*" + _CAPACITY
    + r"[^\d(]{0,200}?"
    r"(\d{1,2}/\d{1,2}\s*-\s*\d{1,2}/\d{1,2}[^-]{0,120}-\s*\d+\s+Quarto\(s\))",
)


@dataclass(frozen=True)
class VacancyRecord:
    """호텔 하나의 빈 객실 한 건"""

    hotel_name: str
    description: str

    @property
    def normalized_key(self) -> str:
        return f"{self.hotel_name}: {self.description}"


@dataclass(frozen=True)
class ExtractionResult:
    """추출 결과

    Attributes:
        records: 문서 순서의 빈 객실 목록 (중복 없음)
        hotel_groups: 호텔명 → 설명 목록 (삽입 순서 = 문서 순서)
        has_no_room_message: 응답에 "빈 객실 없음" 문구가 있었는지
        sections_found: 호텔 섹션 수
    """

    records: Tuple[VacancyRecord, ...] = ()
    hotel_groups: Dict[str, List[str]] = field(default_factory=dict)
    has_no_room_message: bool = False
    sections_found: int = 0

    @property
    def vacancies(self) -> List[str]:
        return [r.normalized_key for r in self.records]

    @property
    def has_availability(self) -> bool:
        return len(self.records) > 0

    @classmethod
    def empty(cls, has_no_room_message: bool = False, sections_found: int = 0) -> "ExtractionResult":
        return cls(has_no_room_message=has_no_room_message, sections_found=sections_found)


@dataclass(frozen=True)
class Candidate:
    """매처가 찾은 후보 - offset은 날짜 줄의 시작 위치"""

    offset: int
    text: str


Matcher = Callable[[str], Iterator[Candidate]]


def has_no_room_message(text: str) -> bool:
    return bool(text) and _NO_ROOM_RE.search(text) is not None


def _iter_date_lines(section: str, pos: int) -> Iterator[re.Match[str]]:
    while True:
        m = _DATE_LINE_RE.match(section, pos)
        if not m:
            return
        yield m
        pos = m.end()


def _header_candidates(header_re: re.Pattern[str], section: str) -> Iterator[Candidate]:
    for header in header_re.finditer(section):
        label_text = section[header.start(1):header.end()]
        for line in _iter_date_lines(section, header.end()):
            yield Candidate(offset=line.start(1), text=f"{label_text} {line.group(1)}")


def match_named_room_types(section: str) -> Iterator[Candidate]:
    """알려진 객실 유형 라벨 (Triplo, Duplo, Chalé, BLUES Luxo ...)"""
    return _header_candidates(_NAMED_HEADER_RE, section)


def match_general_listings(section: str) -> Iterator[Candidate]:
    """대문자로 시작하는 임의 라벨 + 날짜 줄"""
    return _header_candidates(_GENERAL_HEADER_RE, section)


def match_loose_listings(section: str) -> Iterator[Candidate]:
    """날짜 범위와 객실 수 사이가 표준 형태가 아닌 목록"""
    for m in _LOOSE_LISTING_RE.finditer(section):
        label_text = section[m.start(1):m.start(2)]
        yield Candidate(offset=m.start(2), text=f"{label_text} {m.group(2)}")


# 우선순위 순서 (앞쪽이 더 구체적)
MATCHERS: Tuple[Matcher, ...] = (
    match_named_room_types,
    match_general_listings,
    match_loose_listings,
)


def _split_payload(raw_payload: str) -> Tuple[str, List[str]]:
    preamble, *sections = _SECTION_SPLIT_RE.split(raw_payload)
    return preamble, sections


def split_sections(raw_payload: str) -> List[str]:
    """호텔 섹션 목록 (첫 조각은 머리말이라 버림)"""
    return _split_payload(raw_payload)[1]


def hotel_name_from_section(section: str) -> str:
    m = _HOTEL_NAME_RE.match(section)
    if not m:
        return UNKNOWN_HOTEL
    return clean_fragment(m.group(1)) or UNKNOWN_HOTEL


def _section_candidates(section: str, matchers: Tuple[Matcher, ...]) -> List[Candidate]:
    """날짜 줄마다 후보 하나 (가장 긴 라벨, 길이가 같으면 앞쪽 매처), 문서 순서"""
    best: Dict[int, Tuple[int, int, Candidate]] = {}
    for priority, matcher in enumerate(matchers):
        for candidate in matcher(section):
            rank = (len(clean_fragment(candidate.text)), -priority)
            current = best.get(candidate.offset)
            if current is None or rank > current[:2]:
                best[candidate.offset] = (rank[0], rank[1], candidate)
    return [best[offset][2] for offset in sorted(best)]


class _Accumulator:
    def __init__(self) -> None:
        self.records: List[VacancyRecord] = []
        self.hotel_groups: Dict[str, List[str]] = {}
        self._seen: set[str] = set()

    def add(self, hotel_name: str, raw_text: str) -> None:
        description = clean_fragment(raw_text)
        if len(description) < MIN_VACANCY_LENGTH:
            return
        record = VacancyRecord(hotel_name=hotel_name, description=description)
        if record.normalized_key in self._seen:
            return
        self._seen.add(record.normalized_key)
        self.records.append(record)
        self.hotel_groups.setdefault(hotel_name, []).append(description)

    def build(self, has_no_room_message: bool, sections_found: int) -> ExtractionResult:
        return ExtractionResult(
            records=tuple(self.records),
            hotel_groups=self.hotel_groups,
            has_no_room_message=has_no_room_message,
            sections_found=sections_found,
        )


def extract_vacancies(
    raw_payload: Any,
    *,
    matchers: Tuple[Matcher, ...] = MATCHERS,
) -> ExtractionResult:
    """
    원시 응답(HTML/텍스트)에서 빈 객실 추출

    "빈 객실 없음" 문구가 머리말(첫 호텔 섹션 이전)에 있으면 즉시 빈 결과를 반환합니다.
    호텔 섹션 안의 문구는 해당 섹션만 건너뛰게 하며,
    여러 호텔이 섞인 응답에서 다른 섹션의 빈 객실은 그대로 추출됩니다.

    Args:
        raw_payload: 업스트림 원시 응답 (문자열이 아니면 빈 결과)
        matchers: 적용할 매처 (우선순위 순서)

    Returns:
        ExtractionResult (예외를 던지지 않음)
    """
    if not isinstance(raw_payload, str) or not raw_payload:
        return ExtractionResult.empty()

    preamble, sections = _split_payload(raw_payload)
    if has_no_room_message(preamble):
        logger.info("[EXTRACTOR] No-availability message found, skipping pattern matching")
        return ExtractionResult.empty(has_no_room_message=True, sections_found=len(sections))

    no_room = has_no_room_message(raw_payload)
    if not sections:
        logger.info("[EXTRACTOR] No hotel sections found in payload")
        return ExtractionResult.empty(has_no_room_message=no_room)

    acc = _Accumulator()
    for section in sections:
        hotel_name = hotel_name_from_section(section)
        if has_no_room_message(section):
            logger.debug(f"[EXTRACTOR] Skipping section without rooms: {hotel_name}")
            continue

        for candidate in _section_candidates(section, matchers):
            acc.add(hotel_name, candidate.text)

    result = acc.build(has_no_room_message=no_room, sections_found=len(sections))
    logger.info(
        f"[EXTRACTOR] {len(result.records)} vacancies in {len(result.hotel_groups)} hotel(s) "
        f"({len(sections)} sections)"
    )
    return result


_RAW_PAYLOAD_FIELDS = ("html", "rawHtml", "content", "pageSource")


def resolve_raw_payload(data: Any) -> Optional[str]:
    """검색 envelope의 data에서 원시 텍스트 찾기

    data 자체가 문자열이거나, html/rawHtml/content/pageSource 필드,
    또는 문자열인 result 필드를 순서대로 확인합니다.
    """
    if isinstance(data, str):
        return data
    if not isinstance(data, dict):
        return None
    for key in _RAW_PAYLOAD_FIELDS:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    result = data.get("result")
    if isinstance(result, str) and result:
        return result
    return None


def _split_vacancy_text(text: str) -> Tuple[str, str]:
    hotel, sep, description = text.partition(": ")
    if not sep:
        return UNKNOWN_HOTEL, text
    return clean_fragment(hotel) or UNKNOWN_HOTEL, description


def extract_from_structured(data: Any) -> ExtractionResult:
    """업스트림이 이미 구조화한 결과(hotelGroups / vacancies)를 같은 규칙으로 재구성

    data.result.hotelGroups, data.result.vacancies, data.hotelGroups, data.vacancies 순으로 확인합니다.
    vacancies 항목은 "호텔: 설명" 문자열 또는 {hotel, vacancy} 객체입니다.
    summary/status 문자열에 "빈 객실 없음" 문구가 있으면 has_no_room_message로 표시합니다.
    """
    if not isinstance(data, dict):
        return ExtractionResult.empty()

    containers = [data]
    if isinstance(data.get("result"), dict):
        containers.insert(0, data["result"])

    no_room = any(
        has_no_room_message(container[key])
        for container in containers
        for key in ("summary", "status")
        if isinstance(container.get(key), str)
    )

    acc = _Accumulator()
    for container in containers:
        groups = container.get("hotelGroups")
        if isinstance(groups, dict) and groups:
            for hotel, items in groups.items():
                if not isinstance(items, list):
                    continue
                hotel_name = clean_fragment(str(hotel)) or UNKNOWN_HOTEL
                for item in items:
                    if isinstance(item, str):
                        acc.add(hotel_name, item)
            break

        items = container.get("vacancies")
        if isinstance(items, list) and items:
            for item in items:
                if isinstance(item, str):
                    acc.add(*_split_vacancy_text(item))
                elif isinstance(item, dict) and isinstance(item.get("vacancy"), str):
                    acc.add(clean_fragment(str(item.get("hotel") or "")) or UNKNOWN_HOTEL, item["vacancy"])
            break

    return acc.build(has_no_room_message=no_room, sections_found=len(acc.hotel_groups))
