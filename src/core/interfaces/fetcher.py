"""Record fetcher contracts.

Why Protocol:
- The enrichment and redirect adapters only need "GET an endpoint, get
  records back"; they don't care whether it is the real transport or a
  stub in tests.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Protocol, runtime_checkable

from core.domain.models import ApiPage, Record


@runtime_checkable
class RecordFetcher(Protocol):
    """Minimal contract for reading REST collections.

    Rules:
    - Both methods are async (network I/O).
    - A single-object body is returned as a one-element list.
    """

    async def get(self, endpoint: str, params: Mapping[str, Any] | None = None) -> list[Record]:
        """GET `endpoint` and return the decoded records."""

        ...

    async def get_page(self, endpoint: str, params: Mapping[str, Any] | None = None) -> ApiPage:
        """Like `get`, keeping the pagination headers."""

        ...


SlugLookup = Callable[[str], Awaitable[list[Record]]]
