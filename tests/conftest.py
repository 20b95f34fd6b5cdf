"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Dummy/Fake 주입 (HTTP 클라이언트, 시계, 메모리 캐시)
- 전역 상태 초기화

금지:
- 실제 업스트림 호출
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from busca_vagas.crawlers.http_client import HttpResponse  # noqa: E402
from busca_vagas.engine import CacheAdapter, OperationTimeouts, RequestOrchestrator, RetryPolicy  # noqa: E402
from busca_vagas.services.impl.cache_service import CacheService, MemoryStore  # noqa: E402
from busca_vagas.services.impl.vacancy_service import VacancySearchService  # noqa: E402


UPSTREAM_BASE_URL = "http://upstream.test/api"

# 응답 대신 넣으면 취소될 때까지 응답하지 않음
HANG = object()


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


def json_response(
    data: Any = None,
    success: bool = True,
    error: Optional[str] = None,
    status_code: int = 200,
    **extra: Any,
) -> HttpResponse:
    """업스트림 envelope 응답 생성"""
    body: dict[str, Any] = {"success": success, "data": data}
    if error is not None:
        body["error"] = error
    body.update(extra)
    return HttpResponse(status_code=status_code, text=json.dumps(body, ensure_ascii=False))


def status_response(status_code: int, body: Any = None) -> HttpResponse:
    text = json.dumps(body if body is not None else {"success": False}, ensure_ascii=False)
    return HttpResponse(status_code=status_code, text=text)


class FakeClock:
    """주입 가능한 시계 (초)"""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """백오프 대기 시간 기록 (실제로 대기하지 않음)"""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeHttpClient:
    """SharedHttpClient 대역

    - responses: 순서대로 소비되는 HttpResponse / 예외 / HANG
    - handler: url → HttpResponse / 예외 / HANG (지정 시 responses 대신 사용)
    """

    def __init__(
        self,
        responses: Optional[list[Any]] = None,
        handler: Optional[Callable[[str], Any]] = None,
    ):
        self.responses = list(responses or [])
        self.handler = handler
        self.calls: list[str] = []
        self.cancelled = 0

    async def get_text(self, url: str, *, timeout_s: float, headers: Optional[dict] = None) -> HttpResponse:
        _ = (timeout_s, headers)
        self.calls.append(url)

        if self.handler is not None:
            item = self.handler(url)
        else:
            assert self.responses, f"unexpected call: {url}"
            item = self.responses.pop(0)

        if item is HANG:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def memory_cache(fake_clock: FakeClock) -> CacheService:
    return CacheService(MemoryStore(), clock=fake_clock)


@pytest.fixture
def retry_policy() -> RetryPolicy:
    return RetryPolicy(max_retries=3, base_delay_s=1.0, multiplier=2.0)


@pytest.fixture
def timeouts() -> OperationTimeouts:
    return OperationTimeouts(metadata_ms=1000, search_ms=2000, batch_ms=5000)


@pytest.fixture
def make_orchestrator(
    memory_cache: CacheService,
    retry_policy: RetryPolicy,
    timeouts: OperationTimeouts,
    recording_sleep: RecordingSleep,
):
    """FakeHttpClient를 받아 RequestOrchestrator 생성"""

    def _make(http_client: FakeHttpClient, **overrides: Any) -> RequestOrchestrator:
        kwargs: dict[str, Any] = {
            "cache": CacheAdapter(memory_cache),
            "retry_policy": retry_policy,
            "timeouts": timeouts,
            "sleep": recording_sleep,
            "base_url": UPSTREAM_BASE_URL,
        }
        kwargs.update(overrides)
        return RequestOrchestrator(http_client, **kwargs)

    return _make


@pytest.fixture
def make_service(make_orchestrator):
    """FakeHttpClient를 받아 VacancySearchService 생성"""

    def _make(http_client: FakeHttpClient, **overrides: Any) -> VacancySearchService:
        return VacancySearchService(make_orchestrator(http_client, **overrides))

    return _make
