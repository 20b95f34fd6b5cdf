"""Upstream envelope classification.

전송 결과(status, body)를 ApiEnvelope 또는 타입이 있는 예외로 변환합니다.
재시도 판단에 필요한 분류는 모두 여기서 status_code 기준으로 결정됩니다.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from pydantic import ValidationError

from busca_vagas.core.exceptions import (
    ApplicationException,
    ClientRequestException,
    TransientServerException,
)
from busca_vagas.core.logging import logger, sanitize_for_log
from busca_vagas.schemas.vacancy_schema import ApiEnvelope


DEFAULT_API_ERROR_MESSAGE = "API returned error without message"


def _error_message_from_body(text: str) -> str | None:
    try:
        body = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    if isinstance(body, dict):
        msg = body.get("error") or body.get("message")
        if isinstance(msg, str) and msg:
            return msg
    return None


def raise_for_status(endpoint: str, status_code: int, text: str) -> None:
    """
    Raises:
        TransientServerException: 5xx
        ClientRequestException: 4xx
        ApplicationException: 그 외 2xx가 아닌 상태
    """
    if 500 <= status_code <= 599:
        raise TransientServerException(status_code, endpoint)

    if 400 <= status_code <= 499:
        raise ClientRequestException(status_code, endpoint, reason=_error_message_from_body(text))

    if not 200 <= status_code <= 299:
        raise ApplicationException(
            f"Unexpected HTTP status {status_code} from {endpoint}",
            details={"endpoint": endpoint},
            status_code=status_code,
        )


def classify_response(endpoint: str, status_code: int, text: str) -> ApiEnvelope:
    """HTTP 응답을 envelope로 해석

    Raises:
        TransientServerException: 5xx
        ClientRequestException: 4xx
        ApplicationException: envelope 형식 오류 또는 success=false
    """
    raise_for_status(endpoint, status_code, text)

    try:
        envelope = ApiEnvelope.model_validate_json(text)
    except ValidationError as e:
        logger.warning(
            f"[ENVELOPE] Malformed response from {endpoint}: {sanitize_for_log(text)}"
        )
        raise ApplicationException(
            "Malformed response from upstream API",
            details={"endpoint": endpoint, "errors": e.error_count()},
            status_code=status_code,
        )

    if not envelope.success:
        raise ApplicationException(
            envelope.error or DEFAULT_API_ERROR_MESSAGE,
            details={"endpoint": endpoint},
            status_code=status_code,
        )

    return envelope


def parse_health_response(endpoint: str, status_code: int, text: str) -> Dict[str, Any]:
    """헬스 체크 응답 해석 (envelope 없이 JSON 객체만 요구)

    Raises:
        TransientServerException / ClientRequestException: 상태 코드 오류
        ApplicationException: JSON 객체가 아니거나 success=false
    """
    raise_for_status(endpoint, status_code, text)

    try:
        body = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        body = None
    if not isinstance(body, dict):
        raise ApplicationException(
            "Malformed health response from upstream API",
            details={"endpoint": endpoint},
            status_code=status_code,
        )
    if body.get("success") is False:
        raise ApplicationException(
            body.get("error") or DEFAULT_API_ERROR_MESSAGE,
            details={"endpoint": endpoint},
            status_code=status_code,
        )
    return body
