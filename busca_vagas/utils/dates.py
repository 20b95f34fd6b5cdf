"""주말(금→일) 날짜 계산 유틸리티"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional

FRIDAY = 4
MIN_WEEKEND_COUNT = 1
MAX_WEEKEND_COUNT = 12
DEFAULT_WEEKEND_COUNT = 8


@dataclass(frozen=True)
class Weekend:
    """금요일 체크인 / 일요일 체크아웃"""

    friday: date
    sunday: date


def next_friday(today: date) -> date:
    """오늘 이후(오늘 포함) 가장 가까운 금요일"""
    return today + timedelta(days=(FRIDAY - today.weekday()) % 7)


def upcoming_weekends(count: int = DEFAULT_WEEKEND_COUNT, today: Optional[date] = None) -> List[Weekend]:
    """
    다가오는 주말 목록

    Args:
        count: 주말 개수 (1~12)
        today: 기준일 (기본값: 오늘)

    Returns:
        금요일 오름차순 Weekend 목록

    Raises:
        ValueError: count 범위 오류
    """
    if not MIN_WEEKEND_COUNT <= count <= MAX_WEEKEND_COUNT:
        raise ValueError("Weekend count must be between 1 and 12")

    friday = next_friday(today or date.today())
    weekends = []
    for _ in range(count):
        weekends.append(Weekend(friday=friday, sunday=friday + timedelta(days=2)))
        friday += timedelta(days=7)
    return weekends
