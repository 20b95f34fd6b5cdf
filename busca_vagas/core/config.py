"""설정 관리 - 환경 변수 로드 및 검증"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator, model_validator


PRODUCTION_API_BASE_URL = "https://www.mpbarbosa.com/api"
DEVELOPMENT_API_BASE_URL = "http://localhost:3001/api"


class Settings(BaseSettings):
    """애플리케이션 설정"""

    environment: str = "development"

    # 업스트림 API (busca_vagas 스크래퍼)
    # 비어 있으면 environment에 따라 기본 URL을 사용합니다.
    api_base_url: str = ""

    # Redis (선택) - 비어 있으면 메모리 캐시로 동작
    redis_url: Optional[str] = None
    hotel_cache_ttl: int = 86400  # 24시간

    # 업스트림 타임아웃 (ms)
    # 스크래퍼가 실제 브라우저 자동화를 수행하므로 작업 종류별로 예산을 분리합니다.
    # - metadata: 헬스 체크, 호텔 목록
    # - search: 단일 기간 검색, 호텔 목록 스크래핑
    # - weekend_search: 최대 12주말 일괄 검색 (최대 10분)
    metadata_timeout_ms: int = 30000
    search_timeout_ms: int = 60000
    weekend_search_timeout_ms: int = 600000

    # 재시도 (5xx만 재시도, 지수 백오프)
    max_retries: int = 3
    retry_base_delay_s: float = 1.0
    retry_multiplier: float = 2.0
    retry_jitter_s: float = 0.0
    retry_on_timeout: bool = False

    # HTTP 세션
    http_user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    http_impersonate: str = "chrome110"
    http_max_clients: int = 20

    # API
    api_title: str = "Busca Vagas Client"
    api_version: str = "1.2.1"
    api_description: str = "Cache-First 전략으로 제휴 호텔의 빈방을 검색합니다."

    # 로깅
    log_level: str = "INFO"

    @field_validator("hotel_cache_ttl")
    @classmethod
    def validate_hotel_cache_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("hotel_cache_ttl must be positive")
        return v

    @field_validator("metadata_timeout_ms", "search_timeout_ms", "weekend_search_timeout_ms")
    @classmethod
    def validate_timeouts(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_retries must be >= 1")
        return v

    @field_validator("retry_base_delay_s", "retry_jitter_s")
    @classmethod
    def validate_delays(cls, v: float) -> float:
        if v < 0:
            raise ValueError("retry delays must be >= 0")
        return v

    @field_validator("retry_multiplier")
    @classmethod
    def validate_retry_multiplier(cls, v: float) -> float:
        if v < 1:
            raise ValueError("retry_multiplier must be >= 1")
        return v

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def resolve_api_base_url(self) -> "Settings":
        if not self.api_base_url:
            self.api_base_url = (
                PRODUCTION_API_BASE_URL
                if self.is_production
                else DEVELOPMENT_API_BASE_URL
            )
        self.api_base_url = self.api_base_url.rstrip("/")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
