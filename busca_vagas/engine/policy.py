"""Retry / Timeout Policy

작업 종류별 타임아웃 예산과 5xx 재시도(지수 백오프) 정책을 정의합니다.

타임아웃 구조 (업스트림 스크래퍼가 실제 브라우저 자동화를 수행):
- metadata: 30초 (헬스 체크, 호텔 목록)
- search: 60초 (단일 기간 검색)
- batch: 600초 (최대 12주말 일괄 검색)
"""

import random
from dataclasses import dataclass
from typing import Optional

from busca_vagas.core.config import settings


@dataclass(frozen=True)
class OperationTimeouts:
    """작업 종류별 타임아웃 (ms)"""

    metadata_ms: int = 30000
    search_ms: int = 60000
    batch_ms: int = 600000

    def __post_init__(self):
        """설정 검증"""
        for name in ("metadata_ms", "search_ms", "batch_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    @classmethod
    def from_settings(cls) -> "OperationTimeouts":
        return cls(
            metadata_ms=settings.metadata_timeout_ms,
            search_ms=settings.search_timeout_ms,
            batch_ms=settings.weekend_search_timeout_ms,
        )

    def get_timeout_for(self, stage: str) -> int:
        """단계별 타임아웃 (ms)

        Args:
            stage: "metadata" | "search" | "batch"

        Raises:
            ValueError: 알 수 없는 단계
        """
        if stage == "metadata":
            return self.metadata_ms
        elif stage == "search":
            return self.search_ms
        elif stage == "batch":
            return self.batch_ms
        raise ValueError(f"Unknown timeout stage: {stage}")


@dataclass(frozen=True)
class RetryPolicy:
    """재시도 정책

    attempt_index는 0부터 시작합니다. attempt_index 시도가 실패한 뒤
    다음 시도 전 대기 시간은 base_delay_s * multiplier ** attempt_index 입니다.
    (1, 2, 4, ... 단위, 기본 jitter 없음)
    """

    max_retries: int = 3
    base_delay_s: float = 1.0
    multiplier: float = 2.0
    jitter_s: float = 0.0
    retry_on_timeout: bool = False

    def __post_init__(self):
        if self.base_delay_s < 0 or self.jitter_s < 0:
            raise ValueError("delays must be >= 0")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            max_retries=settings.max_retries,
            base_delay_s=settings.retry_base_delay_s,
            multiplier=settings.retry_multiplier,
            jitter_s=settings.retry_jitter_s,
            retry_on_timeout=settings.retry_on_timeout,
        )

    def delay_for(self, attempt_index: int, rng: Optional[random.Random] = None) -> float:
        """attempt_index 실패 후 대기 시간 (초)"""
        delay = self.base_delay_s * (self.multiplier ** attempt_index)
        if self.jitter_s > 0:
            delay += (rng or random).uniform(0, self.jitter_s)
        return delay

    @staticmethod
    def total_attempts(max_retries: int) -> int:
        """총 시도 횟수 (최소 1회)"""
        return max(1, int(max_retries))
