"""Text cleaning helpers."""

from __future__ import annotations

import re

from selectolax.parser import HTMLParser


_WS_RE = re.compile(r"\s+")


def strip_markup(text: str) -> str:
    """HTML 태그 제거 후 텍스트만 반환 (텍스트 노드 사이는 공백, 엔티티는 디코딩됨)

    예시:
    - "Duplo<br>(até 2 pessoas)" -> "Duplo (até 2 pessoas)"
    """
    if not text:
        return ""
    parser = HTMLParser(text)
    return parser.text(separator=" ") or ""


def collapse_whitespace(text: str) -> str:
    """연속 공백/개행을 단일 공백으로"""
    if not text:
        return ""
    return _WS_RE.sub(" ", text).strip()


def clean_fragment(text: str) -> str:
    """
    업스트림 HTML 조각을 표준 설명 텍스트로 정제

    - 태그 제거 (속성 값 안의 ">"도 파서가 처리)
    - HTML 엔티티 디코딩 (&nbsp;, &eacute; 등)
    - 공백 정규화

    Args:
        text: 원본 조각

    Returns:
        정제된 텍스트 (빈 입력이면 "")
    """
    if not text:
        return ""
    cleaned = strip_markup(text)
    # &nbsp; -> U+00A0
    cleaned = cleaned.replace("\xa0", " ")
    return collapse_whitespace(cleaned)
