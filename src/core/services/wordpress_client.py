"""WordPress client facade.

This module is the public surface of the library: one `WordPressClient`
per site, with per-resource fetch methods that assemble query parameters,
call the transport and run the enrichment adapters where they apply.

Error policy:
- Single-resource calls are strict: transport errors and `NotFoundError`
  reach the caller (logged first, never translated).
- Batch sub-steps (redirect repair, featured images) degrade per item.
"""

from __future__ import annotations

import copy
import functools
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Mapping, TypeVar

import httpx

from adapters.image_enricher import ImageEnricher, MediaLibrary
from adapters.redirect_resolver import resolve_redirects
from adapters.wp_transport import WordPressTransport
from core.cache import AsyncCache, make_cache_key
from core.config import ClientSettings
from core.domain.fields import Endpoint, PageField, PostField
from core.domain.models import ImageDescriptor, Record
from core.errors import ConfigurationError, NotFoundError
from core.interfaces.fetcher import SlugLookup
from core.query import FIELDS_PARAM, build_endpoint_params, dedupe_fields, split_fields
from core.retry import SleepFn

logger = logging.getLogger(__name__)

FieldSelection = Iterable[str | Enum] | str | Enum | None
F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

_ENRICHED_ROOTS = {Endpoint.POSTS.value, Endpoint.PAGES.value}
_IMAGE_FIELD = PostField.IMAGE.value
_FEATURED_MEDIA_FIELD = PostField.FEATURED_MEDIA.value


def _logs_failures(fn: F) -> F:
    """Log the operation name before letting an error propagate."""

    @functools.wraps(fn)
    async def wrapper(self: "WordPressClient", *args: Any, **kwargs: Any) -> Any:
        try:
            return await fn(self, *args, **kwargs)
        except Exception as exc:
            logger.error("%s failed: %s (%s)", fn.__name__, exc, type(exc).__name__)
            raise

    return wrapper  # type: ignore[return-value]


def _endpoint_str(endpoint: str | Enum) -> str:
    return str(endpoint.value) if isinstance(endpoint, Enum) else str(endpoint)


def endpoint_root(endpoint: str | Enum) -> str:
    """`posts/12/revisions` -> `posts`."""

    return _endpoint_str(endpoint).strip("/").split("/", 1)[0]


def image_query(params: Mapping[str, Any] | None) -> tuple[dict[str, Any], bool]:
    """Wire params plus whether the selection asks for image data.

    - No `_fields`: full records, images wanted.
    - `image` among `_fields`: it is a client-side field, so it is removed
      from the request and `featured_media` is requested in its place.
    - Any other selection excludes image data.
    """

    wire = dict(params or {})
    fields = split_fields(wire.get(FIELDS_PARAM))
    if not fields:
        return wire, True
    if _IMAGE_FIELD not in fields:
        return wire, False

    fields = [f for f in fields if f != _IMAGE_FIELD]
    if _FEATURED_MEDIA_FIELD not in fields:
        fields.append(_FEATURED_MEDIA_FIELD)
    wire[FIELDS_PARAM] = ",".join(fields)
    return wire, True


class WordPressClient:
    """Typed access to one WordPress site's REST API.

    Usage:
        async with WordPressClient(ClientSettings(base_url="https://example.com")) as wp:
            posts = await wp.fetch_posts(5, [PostField.TITLE, PostField.IMAGE])
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        cache: AsyncCache | None = None,
        sleep_fn: SleepFn | None = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        if not self._settings.base_url:
            raise ConfigurationError(
                "WordPressClient needs a base_url (argument or WP_FETCH_BASE_URL)."
            )
        self._transport = WordPressTransport(self._settings, http_client=http_client, sleep_fn=sleep_fn)
        self._cache = cache or AsyncCache.from_limits(
            enabled=self._settings.cache_enabled,
            max_entries=self._settings.cache_max_entries,
        )
        self._library = MediaLibrary(self._transport, self._settings, self._cache)
        self._images = ImageEnricher(self._transport, self._library)

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def cache(self) -> AsyncCache:
        return self._cache

    async def __aenter__(self) -> "WordPressClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    def invalidate_cache(self) -> None:
        self._cache.clear()

    # ---- generic ----

    async def fetch_data(
        self,
        endpoint: str | Enum,
        params: Mapping[str, Any] | None = None,
        *,
        with_images: bool | None = None,
    ) -> list[Record]:
        """GET any route; posts/pages get featured images unless the fields exclude them."""

        wire, wants_images = image_query(params)
        if with_images is not None:
            wants_images = with_images

        records = await self._transport.get(_endpoint_str(endpoint), wire)

        if wants_images and endpoint_root(endpoint) in _ENRICHED_ROOTS:
            records = await self._images.attach_featured_images(records)
        return records

    async def _query_by_slug(self, endpoint: Endpoint, slug: str, fields: FieldSelection) -> list[Record]:
        params = build_endpoint_params(fields)
        params["slug"] = slug
        return await self.fetch_data(endpoint, params)

    async def _find_by_slug(self, endpoint: Endpoint, slug: str, fields: FieldSelection) -> list[Record]:
        records = await self._query_by_slug(endpoint, slug, fields)
        if not records:
            raise NotFoundError(endpoint.value, slug)
        return records

    def _redirect_lookup(self, fields: FieldSelection) -> SlugLookup:
        selection = dedupe_fields(fields)

        async def lookup(slug: str) -> list[Record]:
            for endpoint in (Endpoint.PAGES, Endpoint.POSTS):
                records = await self._query_by_slug(endpoint, slug, selection)
                if records:
                    return records
            return []

        return lookup

    async def _posts_with_redirects(self, params: dict[str, Any], fields: FieldSelection) -> list[Record]:
        posts = await self.fetch_data(Endpoint.POSTS, params)
        return await resolve_redirects(posts, self._redirect_lookup(fields))

    # ---- posts ----

    @_logs_failures
    async def fetch_posts(self, quantity: int | None = None, fields: FieldSelection = None) -> list[Record]:
        """Latest posts, redirect-resolved. Memoized by (quantity, fields)."""

        selection = dedupe_fields(fields)
        params = build_endpoint_params(selection, quantity)
        key = make_cache_key("posts", quantity, selection)

        posts = await self._cache.get_or_create(
            key, lambda: self._posts_with_redirects(params, selection)
        )
        return copy.deepcopy(posts)

    @_logs_failures
    async def fetch_posts_in_category(
        self,
        category_id: int,
        fields: FieldSelection = None,
        quantity: int | None = None,
    ) -> list[Record]:
        selection = dedupe_fields(fields)
        params = build_endpoint_params(selection, quantity)
        params["categories"] = int(category_id)
        return await self._posts_with_redirects(params, selection)

    @_logs_failures
    async def fetch_post_by_slug(self, slug: str, fields: FieldSelection = None) -> list[Record]:
        return await self._find_by_slug(Endpoint.POSTS, slug, fields)

    @_logs_failures
    async def fetch_post_by_id(self, post_id: int, fields: FieldSelection = None) -> list[Record]:
        return await self.fetch_data(Endpoint.POSTS.with_id(post_id), build_endpoint_params(fields))

    # ---- pages ----

    @_logs_failures
    async def fetch_pages(self, quantity: int | None = None, fields: FieldSelection = None) -> list[Record]:
        return await self.fetch_data(Endpoint.PAGES, build_endpoint_params(fields, quantity))

    @_logs_failures
    async def fetch_pages_by_parent(
        self,
        parent_id: int,
        fields: FieldSelection = None,
        quantity: int | None = None,
    ) -> list[Record]:
        params = build_endpoint_params(fields, quantity)
        params["parent"] = int(parent_id)
        return await self.fetch_data(Endpoint.PAGES, params)

    @_logs_failures
    async def fetch_page_by_slug(self, slug: str, fields: FieldSelection = None) -> list[Record]:
        return await self._find_by_slug(Endpoint.PAGES, slug, fields)

    @_logs_failures
    async def fetch_page_by_id(self, page_id: int, fields: FieldSelection = None) -> list[Record]:
        return await self.fetch_data(Endpoint.PAGES.with_id(page_id), build_endpoint_params(fields))

    # ---- categories ----

    @_logs_failures
    async def fetch_all_categories(self, quantity: int | None = None, fields: FieldSelection = None) -> list[Record]:
        return await self.fetch_data(Endpoint.CATEGORIES, build_endpoint_params(fields, quantity))

    @_logs_failures
    async def fetch_category_by_slug(self, slug: str, fields: FieldSelection = None) -> list[Record]:
        return await self._find_by_slug(Endpoint.CATEGORIES, slug, fields)

    @_logs_failures
    async def fetch_category_by_id(self, category_id: int, fields: FieldSelection = None) -> list[Record]:
        return await self.fetch_data(Endpoint.CATEGORIES.with_id(category_id), build_endpoint_params(fields))

    # ---- media ----

    @_logs_failures
    async def fetch_media(self, quantity: int | None = None, fields: FieldSelection = None) -> list[Record]:
        return await self.fetch_data(Endpoint.MEDIA, build_endpoint_params(fields, quantity))

    @_logs_failures
    async def fetch_media_by_slug(self, slug: str, fields: FieldSelection = None) -> list[Record]:
        return await self._find_by_slug(Endpoint.MEDIA, slug, fields)

    @_logs_failures
    async def fetch_media_by_id(self, media_id: int, fields: FieldSelection = None) -> list[Record]:
        return await self.fetch_data(Endpoint.MEDIA.with_id(media_id), build_endpoint_params(fields))

    # ---- images ----

    @_logs_failures
    async def fetch_all_images(self) -> list[ImageDescriptor]:
        """The media library as image descriptors (cached, in-flight shared)."""

        return await self._library.all_images()

    @_logs_failures
    async def fetch_images_in_page_by_slug(self, slug: str) -> list[ImageDescriptor]:
        """Images of a page's content, in the order they appear."""

        pages = await self._find_by_slug(Endpoint.PAGES, slug, [PageField.ID, PageField.CONTENT])
        page = pages[0]
        content = page.get("content")
        html = content.get("rendered", "") if isinstance(content, dict) else ""
        return await self._images.order_content_images(html or "", int(page["id"]))


_default_client: WordPressClient | None = None


def configure(base_url: str, **overrides: Any) -> WordPressClient:
    """Create the process-wide default client (call once, before fetching)."""

    global _default_client
    settings = ClientSettings(base_url=base_url, **overrides)
    _default_client = WordPressClient(settings)
    return _default_client


def get_client() -> WordPressClient:
    if _default_client is None:
        raise ConfigurationError("configure() must be called before any fetch operation.")
    return _default_client


def reset_default_client() -> None:
    """Forget the default client (tests, re-configuration)."""

    global _default_client
    _default_client = None
