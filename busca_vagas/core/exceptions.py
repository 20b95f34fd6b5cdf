"""커스텀 예외 정의 (Structured Exception Hierarchy)

모든 호출자 대상 실패는 ErrorKind와 사람이 읽을 수 있는 메시지를 함께 가집니다.
재시도 여부는 메시지 문자열이 아니라 전송 계층에서 결정된 ErrorKind/status_code로 판단합니다.
"""
from enum import Enum
from typing import Any, Optional


class UserAction(str, Enum):
    """UI 계층이 보여줄 안내 유형"""
    TRY_AGAIN = "try_again"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NO_RESULTS = "no_results"


class ErrorKind(str, Enum):
    """실패 분류 (전송 경계에서 결정)"""
    TIMEOUT = "TIMEOUT"
    TRANSIENT_SERVER_ERROR = "TRANSIENT_SERVER_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    APPLICATION_ERROR = "APPLICATION_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CACHE_ERROR = "CACHE_ERROR"
    UNKNOWN = "UNKNOWN"

    @property
    def is_transient(self) -> bool:
        return self is ErrorKind.TRANSIENT_SERVER_ERROR

    @property
    def user_action(self) -> UserAction:
        if self in (ErrorKind.TIMEOUT, ErrorKind.CLIENT_ERROR, ErrorKind.VALIDATION_ERROR):
            return UserAction.TRY_AGAIN
        return UserAction.SERVICE_UNAVAILABLE


# 기본 예외 클래스
class BuscaVagasException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    @property
    def user_action(self) -> UserAction:
        return self.kind.user_action

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 업스트림 호출 관련 예외
class UpstreamException(BuscaVagasException):
    """업스트림(스크래퍼 API) 호출 예외의 기본 클래스"""
    def __init__(
        self,
        message: str,
        error_code: str = "UPSTREAM_ERROR",
        details: Optional[dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code
        super().__init__(message, error_code or "UPSTREAM_ERROR", details)


class UpstreamTimeoutException(UpstreamException):
    """응답이 타임아웃 내에 도착하지 않음 (진행 중 요청은 취소됨)"""
    kind = ErrorKind.TIMEOUT

    def __init__(self, operation: str, timeout_ms: int, details: Optional[dict[str, Any]] = None):
        message = f"Request timeout during '{operation}' after {timeout_ms}ms - please try again"
        super().__init__(message, "TIMEOUT_ERROR",
                         details or {"operation": operation, "timeout_ms": timeout_ms})


class TransientServerException(UpstreamException):
    """업스트림 5xx - 재시도 대상"""
    kind = ErrorKind.TRANSIENT_SERVER_ERROR

    def __init__(self, status_code: int, endpoint: str, details: Optional[dict[str, Any]] = None):
        message = f"Upstream server error (HTTP {status_code}) for {endpoint}"
        super().__init__(message, "SERVER_ERROR",
                         details or {"status_code": status_code, "endpoint": endpoint},
                         status_code=status_code)


class ClientRequestException(UpstreamException):
    """업스트림 4xx - 재시도하지 않음"""
    kind = ErrorKind.CLIENT_ERROR

    def __init__(self, status_code: int, endpoint: str, reason: Optional[str] = None,
                 details: Optional[dict[str, Any]] = None):
        message = reason or f"Upstream rejected the request (HTTP {status_code}) for {endpoint}"
        super().__init__(message, "CLIENT_ERROR",
                         details or {"status_code": status_code, "endpoint": endpoint},
                         status_code=status_code)


class ApplicationException(UpstreamException):
    """envelope의 success=false 또는 envelope 형식 오류 (HTTP 200이어도 실패)"""
    kind = ErrorKind.APPLICATION_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        super().__init__(message, "APPLICATION_ERROR", details, status_code=status_code)


class UpstreamConnectionException(UpstreamException):
    """네트워크 연결 실패 (DNS, 연결 거부 등)"""
    kind = ErrorKind.NETWORK_ERROR

    def __init__(self, endpoint: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Network error while calling {endpoint}: {reason}"
        super().__init__(message, "NETWORK_ERROR",
                         details or {"endpoint": endpoint, "reason": reason})


# 캐시 관련 예외
class CacheException(BuscaVagasException):
    """캐시 관련 예외"""
    kind = ErrorKind.CACHE_ERROR

    def __init__(self, message: str, error_code: str = "CACHE_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CACHE_ERROR", details)


class CacheConnectionException(CacheException):
    """캐시 저장소 연결/용량 오류"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache storage unavailable: {reason}"
        super().__init__(message, "CACHE_CONN_FAILED", details or {"reason": reason})


class CacheSerializationException(CacheException):
    """캐시 직렬화/역직렬화 오류"""
    def __init__(self, operation: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache {operation} failed: {reason}"
        super().__init__(message, "CACHE_SERIALIZATION_ERROR",
                         details or {"operation": operation, "reason": reason})


# 유효성 검증 관련 예외
class ValidationException(BuscaVagasException):
    """유효성 검증 예외"""
    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, field: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Validation failed for '{field}': {reason}"
        super().__init__(message, "VALIDATION_ERROR",
                         details or {"field": field, "reason": reason})


class InvalidWeekendCountException(ValidationException):
    """주말 검색 개수 범위 오류 (1~12)"""
    def __init__(self, count: Any, details: Optional[dict[str, Any]] = None):
        super().__init__("count", f"Weekend count must be between 1 and 12 (value: {count})", details)
