"""Upstream scraper API client modules (HTTP + response parsing).

공개 API는 이 파일에서만 export합니다.
"""

from .http_client import HttpResponse, SharedHttpClient, get_shared_http_client, shutdown_shared_http_client

__all__ = [
    "HttpResponse",
    "SharedHttpClient",
    "get_shared_http_client",
    "shutdown_shared_http_client",
]
