"""RPC client helpers with retry on rate limiting and gateway errors."""

from __future__ import annotations

import logging
import time

import httpx
from solana.rpc.api import Client as SolanaHTTPClient  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

_DEFAULT_MAX_RETRIES = 5
_RETRY_STATUS_CODES = frozenset({429, 502, 503, 504})


def _backoff_seconds(response: httpx.Response, attempt: int) -> float:
    retry_after = response.headers.get("Retry-After")
    if retry_after is not None and retry_after.isdigit():
        return float(retry_after)
    return float((attempt + 1) * 2)


class _RetryTransport(httpx.BaseTransport):
    """HTTP transport that retries 429 and 5xx gateway responses.

    Honors an integer ``Retry-After`` header, otherwise backs off linearly.
    """

    def __init__(
        self,
        wrapped: httpx.BaseTransport | None = None,
        max_retries: int = _DEFAULT_MAX_RETRIES,
    ) -> None:
        self._wrapped = wrapped or httpx.HTTPTransport()
        self._max_retries = max_retries

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            response = self._wrapped.handle_request(request)
            if response.status_code not in _RETRY_STATUS_CODES or attempt >= self._max_retries:
                return response
            delay = _backoff_seconds(response, attempt)
            logger.warning(
                "rpc %s returned %d, retrying in %.0fs (%d/%d)",
                request.url,
                response.status_code,
                delay,
                attempt + 1,
                self._max_retries,
            )
            response.close()
            time.sleep(delay)
            attempt += 1

    def close(self) -> None:
        self._wrapped.close()


def new_rpc_client(
    url: str,
    timeout: float = 30,
    max_retries: int = _DEFAULT_MAX_RETRIES,
    transport: httpx.BaseTransport | None = None,
) -> SolanaHTTPClient:
    """Create a Solana RPC client with automatic retry on 429 and 5xx responses.

    ``transport`` replaces the network transport underneath the retry layer.
    """
    client = SolanaHTTPClient(url, timeout=timeout)
    # Swap the provider's httpx session for one using the retry transport.
    client._provider.session = httpx.Client(
        timeout=timeout,
        transport=_RetryTransport(
            wrapped=transport or httpx.HTTPTransport(),
            max_retries=max_retries,
        ),
    )
    return client
