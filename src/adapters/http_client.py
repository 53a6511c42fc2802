"""httpx wrapper.

Why a wrapper:
- Standardizes timeouts, headers and redirects for every request.
- Eases testing: an `httpx.AsyncClient` with a `MockTransport` can be
  injected wherever the real one is built.
"""

from __future__ import annotations

import httpx

from core.config import ClientSettings


def build_async_client(
    settings: ClientSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the client's defaults.

    Why a builder:
    - Centralizes timeouts/headers so every endpoint behaves the same.
    - Keeps the transport free of connection details.
    """

    settings = settings or ClientSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=True,
        headers=headers,
    )
