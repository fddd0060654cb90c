"""HTTP transport for the KieAI API.

Every endpoint answers with the envelope ``{"code": int, "msg": str,
"data": ...}``.  :class:`HttpClient` unwraps it and translates transport,
status and envelope failures into :mod:`kieai.utils.exceptions` types so
nothing untyped reaches the caller.
"""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any

import httpx

from kieai.config import SDKConfig
from kieai.utils.exceptions import (
    HttpFailureError,
    KieAIError,
    NetworkError,
    TimeoutError,
)
from kieai.utils.logging import get_logger

logger = get_logger(__name__)

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class HttpClient:
    """Async JSON client bound to one frozen :class:`SDKConfig`.

    Parameters
    ----------
    config:
        Validated SDK configuration (base URL, key, timeout, retry policy).
    transport:
        Optional ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        config: SDKConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        query = {k: v for k, v in (params or {}).items() if v is not None}
        return await self._request_with_retry("GET", path, params=query, timeout=timeout)

    async def post(
        self,
        path: str,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        body = {k: v for k, v in (json or {}).items() if v is not None}
        # Task creation is not idempotent, so POST is attempted exactly once.
        return await self._request("POST", path, body=body, timeout=timeout)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._client

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        policy = self.config.retry
        attempt = 0
        while True:
            try:
                return await self._request(method, path, params=params, timeout=timeout)
            except KieAIError as exc:
                if attempt >= policy.max_retries or not self._is_retryable(exc):
                    raise
                delay = policy.retry_delay
                if policy.exponential_backoff:
                    delay *= 2**attempt
                attempt += 1
                logger.warning(
                    "http_retry",
                    method=method,
                    path=path,
                    attempt=attempt,
                    max_retries=policy.max_retries,
                    delay=delay,
                    error_kind=exc.kind.value,
                )
                await asyncio.sleep(delay)

    @staticmethod
    def _is_retryable(exc: KieAIError) -> bool:
        if isinstance(exc, (TimeoutError, NetworkError)):
            return True
        return (
            isinstance(exc, HttpFailureError)
            and exc.context.get("status") in _RETRYABLE_STATUS
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        client = self._get_client()
        effective_timeout = timeout or self.config.timeout
        url = path if path.startswith(("http://", "https://")) else f"{self.config.base_url}{path}"
        context: dict[str, Any] = {"method": method, "url": url}
        if params:
            context["params"] = params

        start = time.perf_counter()
        logger.debug("http_request", method=method, url=url)

        try:
            response = await client.request(
                method,
                url,
                params=params or None,
                json=body if method == "POST" else None,
                timeout=effective_timeout,
            )
        except httpx.TimeoutException as exc:
            logger.error("http_timeout", method=method, url=url, timeout=effective_timeout)
            raise TimeoutError(
                f"Request timeout after {effective_timeout}s",
                context={**context, "timeout": effective_timeout},
            ) from exc
        except httpx.TransportError as exc:
            logger.error("http_network_error", method=method, url=url, error=str(exc))
            raise NetworkError(f"Network error: {exc}", context=context) from exc
        except httpx.RequestError as exc:
            # undecodable bodies, redirect loops
            logger.error("http_request_error", method=method, url=url, error=str(exc))
            raise HttpFailureError(
                f"Request failed: {exc}",
                context={**context, "error": type(exc).__name__},
            ) from exc

        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        payload = self._decode_body(response, context)

        if not response.is_success:
            logger.warning(
                "http_status_error",
                method=method,
                url=url,
                status_code=response.status_code,
                elapsed_ms=elapsed_ms,
            )
            raise HttpFailureError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                context={
                    **context,
                    "status": response.status_code,
                    "status_text": response.reason_phrase,
                    "response": payload,
                },
            )

        if not isinstance(payload, dict) or payload.get("code") != 200:
            code = payload.get("code") if isinstance(payload, dict) else None
            msg = payload.get("msg") if isinstance(payload, dict) else None
            logger.warning(
                "http_api_error",
                method=method,
                url=url,
                code=code,
                msg=msg,
                elapsed_ms=elapsed_ms,
            )
            raise HttpFailureError(
                f"API Error: {msg or 'Unknown error'}",
                context={**context, "code": code, "message": msg, "response": payload},
            )

        logger.debug("http_response", method=method, url=url, elapsed_ms=elapsed_ms)
        return payload.get("data")

    @staticmethod
    def _decode_body(response: httpx.Response, context: dict[str, Any]) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise HttpFailureError(
                f"HTTP {response.status_code}: response body is not valid JSON",
                context={
                    **context,
                    "status": response.status_code,
                    "body": response.text[:500],
                },
            ) from exc
