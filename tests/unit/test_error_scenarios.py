"""
에러 시나리오 및 복구 전략

업스트림 호출의 모든 실패 유형과 호출자에게 보여줄 안내(user_action) 매핑
"""

import pytest

from busca_vagas.core.exceptions import (
    ApplicationException,
    BuscaVagasException,
    CacheConnectionException,
    CacheSerializationException,
    ClientRequestException,
    ErrorKind,
    InvalidWeekendCountException,
    TransientServerException,
    UpstreamConnectionException,
    UpstreamTimeoutException,
    UserAction,
)
from busca_vagas.crawlers.boundary.envelope import classify_response, raise_for_status


class TestErrorScenarios:
    """에러 시나리오 테스트"""

    # ========== 업스트림 타임아웃 ==========

    def test_timeout(self):
        """응답이 데드라인 내에 오지 않음"""
        error = UpstreamTimeoutException("/vagas/search", 60000)

        # 복구: 재시도하지 않고 사용자에게 다시 시도 안내
        assert error.error_code == "TIMEOUT_ERROR"
        assert error.kind is ErrorKind.TIMEOUT
        assert error.user_action is UserAction.TRY_AGAIN
        assert "60000ms" in error.message

    # ========== 업스트림 5xx ==========

    def test_transient_server_error(self):
        """스크래퍼 서버 일시 장애 (재시도 후에도 실패)"""
        error = TransientServerException(503, "/vagas/hoteis")

        assert error.error_code == "SERVER_ERROR"
        assert error.kind.is_transient is True
        assert error.user_action is UserAction.SERVICE_UNAVAILABLE

    # ========== 업스트림 4xx ==========

    def test_client_error_with_reason(self):
        error = ClientRequestException(400, "/vagas/search", reason="Invalid date format")

        assert error.message == "Invalid date format"
        assert error.kind.is_transient is False
        assert error.user_action is UserAction.TRY_AGAIN

    def test_client_error_without_reason(self):
        error = ClientRequestException(404, "/vagas/search")

        assert "HTTP 404" in error.message

    # ========== envelope success=false ==========

    def test_application_error(self):
        error = ApplicationException("Hotel not found")

        assert error.error_code == "APPLICATION_ERROR"
        assert error.user_action is UserAction.SERVICE_UNAVAILABLE

    # ========== 네트워크 ==========

    def test_network_error(self):
        error = UpstreamConnectionException("/health", "ConnectionRefused")

        assert error.error_code == "NETWORK_ERROR"
        assert error.kind.is_transient is False
        assert error.user_action is UserAction.SERVICE_UNAVAILABLE

    # ========== 캐시 ==========

    def test_cache_connection_error(self):
        """캐시(Redis) 연결 실패"""
        with pytest.raises(CacheConnectionException) as exc_info:
            raise CacheConnectionException(
                reason="Connection refused",
                details={"host": "localhost", "port": 6379}
            )

        # 복구: 메모리 캐시로 강등 후 계속 진행
        assert exc_info.value.error_code == "CACHE_CONN_FAILED"

    def test_cache_serialization_error(self):
        error = CacheSerializationException("serialize", "Object of type set is not JSON serializable")

        assert error.error_code == "CACHE_SERIALIZATION_ERROR"
        assert error.kind is ErrorKind.CACHE_ERROR

    # ========== 입력 검증 ==========

    def test_invalid_weekend_count(self):
        error = InvalidWeekendCountException(13)

        assert error.error_code == "VALIDATION_ERROR"
        assert "Weekend count must be between 1 and 12 (value: 13)" in error.message
        assert error.user_action is UserAction.TRY_AGAIN

    def test_str_contains_code_and_message(self):
        error = BuscaVagasException("boom", "SOMETHING")

        assert str(error) == "[SOMETHING] boom"
        assert error.kind is ErrorKind.UNKNOWN


class TestStatusClassification:
    """상태 코드 → 예외 분류 (메시지 문자열과 무관)"""

    @pytest.mark.parametrize("status", [500, 502, 503, 504, 599])
    def test_5xx_is_transient(self, status):
        with pytest.raises(TransientServerException):
            raise_for_status("/x", status, "")

    @pytest.mark.parametrize("status", [400, 401, 404, 429, 499])
    def test_4xx_is_client_error(self, status):
        with pytest.raises(ClientRequestException):
            raise_for_status("/x", status, '{"error": "HTTP 500 upstream"}')

    @pytest.mark.parametrize("status", [301, 302, 100])
    def test_other_non_2xx(self, status):
        with pytest.raises(ApplicationException):
            raise_for_status("/x", status, "")

    def test_2xx_passes(self):
        assert raise_for_status("/x", 204, "") is None

    def test_success_envelope(self):
        envelope = classify_response("/x", 200, '{"success": true, "data": {"a": 1}}')

        assert envelope.data == {"a": 1}
