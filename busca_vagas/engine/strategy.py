"""Execution Strategy - Retry Decision Logic

Determines retry eligibility from the typed error kind decided at the
transport boundary, never from the error message text.
"""

from busca_vagas.core.exceptions import BuscaVagasException, ErrorKind


class ExecutionStrategy:
    """재시도 전략 결정

    Usage:
        strategy = ExecutionStrategy()

        try:
            envelope = await attempt()
        except BuscaVagasException as e:
            if strategy.should_retry(e, attempt_index, max_attempts):
                ...
    """

    def __init__(self, retry_on_timeout: bool = False):
        self.retry_on_timeout = retry_on_timeout

    def is_retryable(self, error: Exception) -> bool:
        """재시도 가능한 실패인가?

        - TransientServerException (5xx): 재시도
        - UpstreamTimeoutException: retry_on_timeout 설정 시에만
        - 그 외 (4xx, envelope 오류, 네트워크 오류): 즉시 실패
        """
        if not isinstance(error, BuscaVagasException):
            return False
        if error.kind.is_transient:
            return True
        if error.kind is ErrorKind.TIMEOUT:
            return self.retry_on_timeout
        return False

    def should_retry(self, error: Exception, attempt_index: int, max_attempts: int) -> bool:
        """재시도 여부 결정

        Args:
            error: 발생한 예외
            attempt_index: 방금 실패한 시도 (0부터)
            max_attempts: 총 허용 시도 횟수

        Returns:
            bool: 남은 시도가 있고 일시적 실패인 경우에만 True
        """
        has_attempts_left = attempt_index + 1 < max_attempts
        return has_attempts_left and self.is_retryable(error)
