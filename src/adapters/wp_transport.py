"""Transport for the WordPress REST API.

One logical call = one GET against `{base_url}/wp-json/wp/v2/{endpoint}`,
wrapped in a per-attempt timeout and a bounded retry. Failures are
classified into the transport errors of `core.errors` and propagate;
nothing here swallows them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import httpx

from adapters.http_client import build_async_client
from core.config import ClientSettings
from core.domain.models import ApiPage, Record
from core.errors import (
    ConfigurationError,
    HttpError,
    NetworkError,
    ParseError,
    RequestTimeoutError,
    TransportError,
)
from core.interfaces.fetcher import RecordFetcher
from core.query import encode_query
from core.retry import RetryConfig, SleepFn, call_with_retries

logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    # Any failure of the GET itself; a body that doesn't parse won't get better.
    return isinstance(exc, (NetworkError, RequestTimeoutError, HttpError))


def _int_header(response: httpx.Response, name: str) -> int | None:
    value = response.headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class WordPressTransport(RecordFetcher):
    """Async GET client for one WordPress site."""

    def __init__(
        self,
        settings: ClientSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep_fn: SleepFn | None = None,
    ) -> None:
        if not settings.base_url:
            raise ConfigurationError("base_url is not configured")
        self._settings = settings
        self._client = http_client
        self._owns_client = http_client is None
        self._retry = RetryConfig.from_settings(settings)
        self._sleep_fn = sleep_fn

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    def url_for(self, endpoint: str) -> str:
        return f"{self._settings.api_root}/{str(endpoint).strip('/')}"

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_async_client(self._settings)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def get(self, endpoint: str, params: Mapping[str, Any] | None = None) -> list[Record]:
        page = await self.get_page(endpoint, params)
        return page.records

    async def get_page(self, endpoint: str, params: Mapping[str, Any] | None = None) -> ApiPage:
        url = self.url_for(endpoint)
        query = encode_query(params)
        request_url = str(httpx.URL(url, params=query))

        try:
            response = await call_with_retries(
                lambda: self._attempt(url, query, request_url),
                cfg=self._retry,
                is_retryable=_is_retryable,
                operation=f"GET {request_url}",
                sleep_fn=self._sleep_fn,
            )
            data = self._decode(response, request_url)
        except TransportError as exc:
            logger.error("GET %s failed: %s (%s)", request_url, exc, type(exc).__name__)
            raise

        records = data if isinstance(data, list) else [data]
        return ApiPage(
            records=records,
            total=_int_header(response, "X-WP-Total"),
            total_pages=_int_header(response, "X-WP-TotalPages"),
        )

    async def _attempt(self, url: str, query: dict[str, str], request_url: str) -> httpx.Response:
        timeout = self._settings.timeout_seconds
        logger.debug("GET %s", request_url)
        try:
            response = await asyncio.wait_for(self._http().get(url, params=query), timeout=timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise RequestTimeoutError(f"Request timed out after {timeout}s", url=request_url) from exc
        except httpx.RequestError as exc:
            raise NetworkError(f"Network error: {exc}", url=request_url) from exc

        if not response.is_success:
            logger.debug("Response body for %s: %s", request_url, response.text[:500])
            raise HttpError(
                f"HTTP {response.status_code} {response.reason_phrase}",
                url=request_url,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response, request_url: str) -> Any:
        try:
            data = response.json()
        except ValueError as exc:
            raise ParseError(f"Invalid JSON body: {exc}", url=request_url) from exc
        if not isinstance(data, (list, dict)):
            raise ParseError(f"Unexpected JSON payload type: {type(data).__name__}", url=request_url)
        return data
