"""공유 HTTP 클라이언트 (curl_cffi)

- 요청마다 AsyncSession을 만들면 TLS/커넥션 오버헤드가 커지므로
  프로세스 단위로 세션을 재사용합니다.
- 연결 실패는 여기서 UpstreamConnectionException으로 분류합니다.
  (상태 코드 분류는 boundary.envelope 에서)
- 앱 종료 시 close()로 정리합니다.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Dict

from curl_cffi import CurlError
from curl_cffi.requests import AsyncSession

from busca_vagas.core.config import settings
from busca_vagas.core.exceptions import UpstreamConnectionException, UpstreamTimeoutException
from busca_vagas.core.logging import logger


# libcurl CURLE_OPERATION_TIMEDOUT
_CURLE_OPERATION_TIMEDOUT = 28

# asyncio 데드라인이 먼저 동작하도록 curl 자체 타임아웃에 여유를 둡니다.
_CURL_TIMEOUT_GRACE_S = 5.0


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    text: str


class SharedHttpClient:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._session: Optional[AsyncSession] = None

    async def _ensure_session(self) -> AsyncSession:
        async with self._lock:
            if self._session is not None:
                return self._session
            self._session = AsyncSession(
                impersonate=settings.http_impersonate,
                headers=self.default_headers(),
                allow_redirects=True,
                max_clients=int(settings.http_max_clients),
                trust_env=False,
            )
            return self._session

    def default_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": settings.http_user_agent,
            "Accept": "application/json",
            "Accept-Language": "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7",
        }

    async def get_text(
        self,
        url: str,
        *,
        timeout_s: float,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        """GET 요청 후 (status, body) 반환

        Raises:
            UpstreamConnectionException: 연결 실패
            UpstreamTimeoutException: curl 자체 타임아웃
        """
        sess = await self._ensure_session()
        try:
            resp = await sess.get(
                url,
                headers=headers,
                timeout=timeout_s + _CURL_TIMEOUT_GRACE_S,
            )
        except CurlError as e:
            if getattr(e, "code", None) == _CURLE_OPERATION_TIMEDOUT:
                raise UpstreamTimeoutException(url, int(timeout_s * 1000))
            logger.info(f"[HTTP_CLIENT] GET failed: {type(e).__name__}: {repr(e)}")
            raise UpstreamConnectionException(url, type(e).__name__)

        status = getattr(resp, "status_code", 0) or 0
        text = getattr(resp, "text", "") or ""
        return HttpResponse(status_code=int(status), text=text)

    async def close(self) -> None:
        async with self._lock:
            if self._session is None:
                return
            try:
                await self._session.close()
            except CurlError as e:
                logger.debug(f"[HTTP_CLIENT] close failed: {e}")
            self._session = None


_shared_http_client = SharedHttpClient()


def get_shared_http_client() -> SharedHttpClient:
    return _shared_http_client


async def shutdown_shared_http_client() -> None:
    await _shared_http_client.close()
