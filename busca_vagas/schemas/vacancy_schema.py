"""Pydantic 스키마 정의 (Validation Enhanced)"""
from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


ALL_HOTELS = "-1"


class VacancySearchRequest(BaseModel):
    """빈방 검색 요청 (호출마다 생성, 불변)"""
    model_config = ConfigDict(frozen=True)

    hotel_filter: str = Field(ALL_HOTELS, max_length=100, description="호텔 ID ('-1' = 전체)")
    checkin_date: date = Field(..., description="체크인 날짜")
    checkout_date: date = Field(..., description="체크아웃 날짜")

    @field_validator("hotel_filter")
    @classmethod
    def validate_hotel_filter(cls, v: str) -> str:
        """호텔 필터 검증: 공백 불가, URL에 그대로 들어가므로 위험 문자 제한"""
        v = (v or "").strip()
        if not v:
            return ALL_HOTELS
        dangerous_chars = ["&", "?", "#", "/", "<", ">", '"', "'", "\\", "\0", "\n", "\r"]
        for char in dangerous_chars:
            if char in v:
                raise ValueError(f"hotel_filter에 허용되지 않는 문자가 포함되어 있습니다: {char}")
        return v

    @field_validator("checkin_date", "checkout_date", mode="before")
    @classmethod
    def reject_time_of_day(cls, v: Any) -> Any:
        """달력 날짜만 허용 (시각 정보가 있는 datetime은 거절)"""
        if isinstance(v, datetime):
            if v.time() != datetime.min.time() or v.tzinfo is not None:
                raise ValueError("search dates must be calendar dates without time of day")
            return v.date()
        return v

    @model_validator(mode="after")
    def validate_date_order(self) -> "VacancySearchRequest":
        if self.checkin_date >= self.checkout_date:
            raise ValueError("checkin_date must be before checkout_date")
        return self

    @property
    def checkin_iso(self) -> str:
        return self.checkin_date.isoformat()

    @property
    def checkout_iso(self) -> str:
        return self.checkout_date.isoformat()


class Hotel(BaseModel):
    """호텔 메타데이터 (GET /vagas/hoteis)"""
    model_config = ConfigDict(populate_by_name=True)

    hotel_id: str = Field(..., validation_alias=AliasChoices("hotelId", "hotel_id", "id"), description="호텔 ID")
    name: str = Field(..., description="표시 이름")
    type: str = Field("Hotel", description="'Hotel' 또는 'All'")

    @field_validator("hotel_id", mode="before")
    @classmethod
    def coerce_hotel_id(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v


class ApiEnvelope(BaseModel):
    """업스트림 공통 응답 래퍼 ({success, data, error})"""
    model_config = ConfigDict(extra="allow")

    success: bool
    data: Any = None
    error: Optional[str] = None


class QueryDetailsData(BaseModel):
    """검색 메타데이터 (요청 echo + 집계)"""
    hotel_filter: str
    checkin: str
    checkout: str
    hotels_found: int = Field(..., ge=0)
    total_vacancies_found: int = Field(..., ge=0)


class VacancyResultData(BaseModel):
    """검색 결과 (façade 응답용)"""
    has_availability: bool
    status: str = Field(..., description="AVAILABLE | NO_AVAILABILITY")
    summary: str
    vacancies: List[str] = Field(default_factory=list)
    hotel_groups: dict[str, List[str]] = Field(default_factory=dict)
    query_details: QueryDetailsData


class VacancySearchResponse(BaseModel):
    """빈방 검색 응답"""
    status: str = Field(..., description="success or error")
    data: Optional[VacancyResultData] = Field(None, description="검색 결과")
    message: str = Field(..., description="응답 메시지")
    error_code: str | None = Field(None, description="에러 코드 (error 시)")
    user_action: str | None = Field(None, description="try_again | service_unavailable | no_results")


class WeekendEntryData(BaseModel):
    """주말 1건 결과"""
    checkin: str
    checkout: str
    result: Optional[VacancyResultData] = None
    error_code: str | None = None
    error_message: str | None = None


class WeekendSearchResponse(BaseModel):
    """주말 일괄 검색 응답"""
    status: str
    weekends_searched: int = 0
    weekends_with_vacancies: int = 0
    weekends: List[WeekendEntryData] = Field(default_factory=list)
    message: str
    error_code: str | None = None
    user_action: str | None = None


class HotelListResponse(BaseModel):
    """호텔 목록 응답"""
    status: str
    data: List[Hotel] = Field(default_factory=list)
    message: str
    error_code: str | None = None


class CacheStatsResponse(BaseModel):
    """캐시 상태 응답"""
    key: str
    exists: bool
    expired: bool
    age_seconds: float | None = None
    remaining_seconds: float | None = None
    backend: str


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str
    timestamp: datetime
    version: str
    upstream: str
    cache_backend: str
