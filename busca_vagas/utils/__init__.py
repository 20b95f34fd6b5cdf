"""Utilities package

- text/: HTML 조각 정제
- dates: 주말(금→일) 계산
"""

from .dates import Weekend, next_friday, upcoming_weekends
from .text import clean_fragment, collapse_whitespace, strip_markup

__all__ = [
    # dates
    "Weekend",
    "next_friday",
    "upcoming_weekends",
    # text
    "clean_fragment",
    "collapse_whitespace",
    "strip_markup",
]
