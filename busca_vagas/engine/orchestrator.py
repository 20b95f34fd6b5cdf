"""Request Orchestrator - Upstream Call Policy

Coordinates every call to the upstream scraper API:
1. Cache lookup (cacheable operations only)
2. Network call under a cancellable deadline
3. Exponential-backoff retry for transient (5xx) failures
4. Cache write on success (failures are never cached)
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from busca_vagas.core.config import settings
from busca_vagas.core.exceptions import BuscaVagasException, UpstreamTimeoutException
from busca_vagas.core.logging import logger
from busca_vagas.crawlers.boundary.envelope import classify_response

from .cache_adapter import CacheAdapter
from .policy import OperationTimeouts, RetryPolicy
from .strategy import ExecutionStrategy


# (endpoint, status_code, body) -> 해석 결과, 실패 시 BuscaVagasException
ResponseParser = Callable[[str, int, str], Any]


class RequestOrchestrator:
    """업스트림 호출 오케스트레이터

    타임아웃/재시도/캐시 정책을 한 곳에서 적용합니다.
    호출마다 자체 타임아웃/재시도 상태를 가지므로 동시 호출 간 동기화가 필요 없습니다.
    """

    def __init__(
        self,
        http_client,
        cache: Optional[CacheAdapter] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeouts: Optional[OperationTimeouts] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        base_url: Optional[str] = None,
    ):
        """
        Args:
            http_client: get_text(url, timeout_s=...) 구현체 (SharedHttpClient)
            cache: 캐시 어댑터 (없으면 메모리 캐시)
            retry_policy: 재시도 정책 (기본값: settings)
            timeouts: 작업별 타임아웃 (기본값: settings)
            sleep: 백오프 대기 함수 - 테스트에서 주입
            base_url: 업스트림 API 기본 URL (기본값: settings.api_base_url)
        """
        if http_client is None:
            raise ValueError("http_client must not be None")

        self.http_client = http_client
        self.cache = cache if cache is not None else CacheAdapter()
        self.retry_policy = retry_policy or RetryPolicy.from_settings()
        self.timeouts = timeouts or OperationTimeouts.from_settings()
        self.strategy = ExecutionStrategy(retry_on_timeout=self.retry_policy.retry_on_timeout)
        self._sleep = sleep
        self.base_url = (base_url if base_url is not None else settings.api_base_url).rstrip("/")

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    async def _attempt(self, endpoint: str, timeout_ms: int, parse: ResponseParser) -> Any:
        """단일 시도 - 데드라인 초과 시 진행 중 요청을 취소"""
        url = self.url_for(endpoint)
        timeout_s = timeout_ms / 1000
        try:
            response = await asyncio.wait_for(
                self.http_client.get_text(url, timeout_s=timeout_s),
                timeout=timeout_s,
            )
        except asyncio.TimeoutError:
            raise UpstreamTimeoutException(endpoint, timeout_ms)

        return parse(endpoint, response.status_code, response.text)

    async def fetch_with_policy(
        self,
        endpoint: str,
        timeout_ms: int,
        max_retries: Optional[int] = None,
        parse: ResponseParser = classify_response,
    ) -> Any:
        """타임아웃/재시도 정책을 적용해 업스트림 호출

        Args:
            endpoint: API 경로 (예: "/vagas/hoteis") 또는 절대 URL
            timeout_ms: 시도당 타임아웃 (ms)
            max_retries: 총 시도 횟수 상한 (기본값: retry_policy.max_retries)
            parse: 응답 해석기 (기본값: envelope 해석)

        Returns:
            ApiEnvelope (기본 parse 사용 시)

        Raises:
            BuscaVagasException: 마지막 시도의 오류 (그대로 전달)
        """
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive: {timeout_ms}")

        limit = self.retry_policy.max_retries if max_retries is None else max_retries
        max_attempts = RetryPolicy.total_attempts(limit)

        attempt_index = 0
        while True:
            try:
                result = await self._attempt(endpoint, timeout_ms, parse)
                if attempt_index > 0:
                    logger.info(
                        f"[ORCHESTRATOR] {endpoint} succeeded on attempt {attempt_index + 1}/{max_attempts}"
                    )
                return result
            except BuscaVagasException as e:
                if not self.strategy.should_retry(e, attempt_index, max_attempts):
                    logger.warning(
                        f"[ORCHESTRATOR] {endpoint} failed ({e.kind.value}) "
                        f"after {attempt_index + 1}/{max_attempts} attempt(s): {e.message}"
                    )
                    raise

                delay = self.retry_policy.delay_for(attempt_index)
                logger.info(
                    f"[ORCHESTRATOR] {endpoint} attempt {attempt_index + 1}/{max_attempts} failed "
                    f"({e.kind.value}), retrying in {delay:.2f}s"
                )
                await self._sleep(delay)
                attempt_index += 1

    async def fetch_stage(
        self,
        endpoint: str,
        stage: str,
        parse: ResponseParser = classify_response,
    ) -> Any:
        """작업 종류(metadata/search/batch)의 타임아웃으로 호출"""
        return await self.fetch_with_policy(
            endpoint, self.timeouts.get_timeout_for(stage), parse=parse
        )

    async def get_cached_or_fetch(
        self,
        cache_key: str,
        endpoint: str,
        stage: str = "metadata",
        ttl_seconds: Optional[float] = None,
        force_refresh: bool = False,
        validate: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """캐시 조회 → 업스트림 호출 → 성공 시 캐시 저장

        동일 키에 대한 동시 미스는 각각 호출하고 마지막 쓰기가 남습니다.

        Args:
            cache_key: 논리 캐시 키 (예: "hotel-list")
            endpoint: API 경로
            stage: 타임아웃 단계
            ttl_seconds: 캐시 TTL (기본값: settings.hotel_cache_ttl)
            force_refresh: True면 캐시를 무효화하고 새로 조회
            validate: 캐시 저장 전 data 검증 (예외를 던지면 저장하지 않음)

        Returns:
            envelope.data
        """
        if force_refresh:
            await self.cache.invalidate(cache_key)
        else:
            cached = await self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"[ORCHESTRATOR] cache hit: {cache_key}")
                return cached

        envelope = await self.fetch_stage(endpoint, stage)
        if validate is not None:
            validate(envelope.data)
        await self.cache.set(cache_key, envelope.data, ttl_seconds)
        return envelope.data
