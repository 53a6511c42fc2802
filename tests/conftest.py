"""Shared fixtures.

No network: every client is wired to an `httpx.MockTransport` driven by
`Router`, which matches on API path + query params and records requests.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import httpx
import pytest
import pytest_asyncio

from core.config import ClientSettings
from core.services.wordpress_client import WordPressClient

BASE_URL = "https://cms.example.com"
API_PREFIX = "/wp-json/wp/v2/"

Handler = Callable[[httpx.Request], "httpx.Response | Awaitable[httpx.Response]"]


@dataclass
class Route:
    path: str
    params: dict[str, str] = field(default_factory=dict)
    handler: Handler | None = None
    json: Any = None
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)

    def matches(self, path: str, params: httpx.QueryParams) -> bool:
        if path != self.path:
            return False
        return all(params.get(k) == v for k, v in self.params.items())


class Router:
    """Minimal REST stub for the WordPress API."""

    def __init__(self) -> None:
        self.routes: list[Route] = []
        self.requests: list[httpx.Request] = []

    def add(
        self,
        path: str,
        json: Any = None,
        *,
        params: dict[str, str] | None = None,
        status: int = 200,
        headers: dict[str, str] | None = None,
        handler: Handler | None = None,
    ) -> Route:
        route = Route(
            path=path,
            params=params or {},
            handler=handler,
            json=json,
            status=status,
            headers=headers or {},
        )
        # Most specific (most params) first.
        self.routes.append(route)
        self.routes.sort(key=lambda r: len(r.params), reverse=True)
        return route

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if api_path(r) == path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = api_path(request)
        for route in self.routes:
            if not route.matches(path, request.url.params):
                continue
            if route.handler is not None:
                result = route.handler(request)
                if asyncio.iscoroutine(result):
                    result = await result
                return result
            return httpx.Response(route.status, json=route.json, headers=route.headers)
        return httpx.Response(404, json={"code": "rest_no_route", "message": path})


def api_path(request: httpx.Request) -> str:
    return request.url.path.removeprefix(API_PREFIX)


@pytest.fixture
def router() -> Router:
    return Router()


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(
        base_url=BASE_URL,
        retry_delay_seconds=0,
        timeout_seconds=1.0,
    )


@pytest_asyncio.fixture
async def http_client(router: Router):
    client = httpx.AsyncClient(transport=httpx.MockTransport(router))
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def client(settings: ClientSettings, http_client: httpx.AsyncClient):
    wp = WordPressClient(settings, http_client=http_client)
    yield wp
    await wp.aclose()


def media_record(
    media_id: int,
    url: str,
    *,
    title: str = "",
    alt: str = "",
    caption: str = "",
    description: str = "",
    parent: int | None = None,
    with_sizes: bool = True,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": media_id,
        "source_url": url,
        "title": {"rendered": title},
        "alt_text": alt,
        "caption": {"rendered": caption},
        "description": {"rendered": description},
    }
    if parent is not None:
        record["post"] = parent
    if with_sizes:
        record["media_details"] = {"sizes": {"full": {"source_url": url}}}
    return record
