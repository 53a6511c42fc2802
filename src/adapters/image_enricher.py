"""Image enrichment (featured images, in-content image ordering).

Used in two ways:
- Posts/pages get their `featured_media` id resolved to an image
  descriptor stored under `image`. Lenient: a broken media item degrades
  to the empty descriptor, never failing the listing.
- A page body's `<img>` tags define an order; the media attached to the
  page (or, failing that, the whole media library) is returned in it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from adapters.content_parser import extract_caption, extract_image_urls, normalize_image_url
from core.cache import AsyncCache
from core.config import ClientSettings
from core.domain.fields import Endpoint, MediaField
from core.domain.models import ImageDescriptor, Record
from core.fanout import gather_outcomes, outcome_values
from core.interfaces.fetcher import RecordFetcher
from core.query import build_endpoint_params

logger = logging.getLogger(__name__)

MEDIA_LIBRARY_CACHE_KEY = "media-library"
MEDIA_LIBRARY_FIELDS = (
    MediaField.ID,
    MediaField.SOURCE_URL,
    MediaField.TITLE,
    MediaField.ALT_TEXT,
    MediaField.CAPTION,
    MediaField.DESCRIPTION,
)
ATTACHED_MEDIA_PAGE_SIZE = 100


def _dig(record: Any, *keys: str) -> Any:
    current = record
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _rendered(value: Any) -> str:
    if isinstance(value, dict):
        value = value.get("rendered")
    return value if isinstance(value, str) else ""


def descriptor_from_media(media: Record, *, url: str | None = None) -> ImageDescriptor:
    """Build a descriptor from a media record (`url` defaults to `source_url`)."""

    media_id = media.get("id")
    source_url = url if url is not None else media.get("source_url")
    alt = media.get("alt_text")
    return ImageDescriptor(
        id=media_id if isinstance(media_id, int) else None,
        url=source_url if isinstance(source_url, str) else "",
        title=_rendered(media.get("title")),
        alt=alt if isinstance(alt, str) else "",
        caption=extract_caption(_rendered(media.get("caption")), _rendered(media.get("description"))),
    )


def sort_by_appearance(images: Iterable[ImageDescriptor], image_urls: list[str]) -> list[ImageDescriptor]:
    """Stable sort by first position of each image's key in `image_urls`.

    Images that don't appear in the content go last, in their given order.
    """

    order: dict[str, int] = {}
    for index, url in enumerate(image_urls):
        order.setdefault(normalize_image_url(url), index)
    missing = len(order)
    return sorted(images, key=lambda image: order.get(normalize_image_url(image.url), missing))


def needs_featured_image(record: Record) -> bool:
    return not record.get("image") and bool(record.get("featured_media"))


def _describe_featured(record: Record) -> str:
    media_id = record.get("featured_media") if isinstance(record, dict) else None
    return f"media {media_id}"


class MediaLibrary:
    """The whole media library as image descriptors, fetched once per cache."""

    def __init__(self, fetcher: RecordFetcher, settings: ClientSettings, cache: AsyncCache) -> None:
        self._fetcher = fetcher
        self._settings = settings
        self._cache = cache

    async def all_images(self) -> list[ImageDescriptor]:
        images = await self._cache.get_or_create(MEDIA_LIBRARY_CACHE_KEY, self._load)
        return [image.model_copy() for image in images]

    def invalidate(self) -> None:
        self._cache.invalidate(MEDIA_LIBRARY_CACHE_KEY)

    async def _load(self) -> list[ImageDescriptor]:
        params = build_endpoint_params(MEDIA_LIBRARY_FIELDS, self._settings.media_page_size)

        first = await self._fetcher.get_page(Endpoint.MEDIA.value, {**params, "page": 1})
        total_pages = min(first.total_pages or 1, self._settings.media_max_pages)
        if (first.total_pages or 1) > total_pages:
            logger.warning(
                "Media library has %s pages; reading the first %d",
                first.total_pages,
                total_pages,
            )

        rest = await asyncio.gather(
            *(
                self._fetcher.get_page(Endpoint.MEDIA.value, {**params, "page": page})
                for page in range(2, total_pages + 1)
            )
        )

        records: list[Record] = list(first.records)
        for page in rest:
            records.extend(page.records)

        images = [descriptor_from_media(media) for media in records if isinstance(media, dict)]
        logger.debug("Loaded %d media library images (%d pages)", len(images), total_pages)
        return images


class ImageEnricher:
    """Featured-image resolution and content image ordering."""

    def __init__(self, fetcher: RecordFetcher, library: MediaLibrary) -> None:
        self._fetcher = fetcher
        self._library = library

    async def resolve_featured_image(self, media_id: int) -> ImageDescriptor:
        """Full-size descriptor for `media/{id}` (empty when sizes are missing).

        Transport errors propagate; `attach_featured_images` degrades them.
        """

        records = await self._fetcher.get(Endpoint.MEDIA.with_id(media_id))
        if not records or not isinstance(records[0], dict):
            return ImageDescriptor.empty()

        media = records[0]
        url = _dig(media, "media_details", "sizes", "full", "source_url")
        if not isinstance(url, str) or not url:
            return ImageDescriptor.empty()

        return descriptor_from_media(media, url=url)

    async def attach_featured_images(self, records: list[Record]) -> list[Record]:
        """Copy of `records` with `image` filled in where `featured_media` is set."""

        async def enrich_one(record: Record) -> Record:
            if not isinstance(record, dict) or not needs_featured_image(record):
                return record
            image = await self.resolve_featured_image(int(record["featured_media"]))
            return {**record, "image": image.model_dump()}

        def degrade(record: Record) -> Record:
            if not isinstance(record, dict) or not needs_featured_image(record):
                return record
            return {**record, "image": ImageDescriptor.empty().model_dump()}

        outcomes = await gather_outcomes(
            records,
            enrich_one,
            degrade,
            operation="attach_featured_images",
            describe=_describe_featured,
        )
        return outcome_values(outcomes)

    async def attached_images(self, parent_id: int) -> list[ImageDescriptor]:
        """Media whose `parent` is `parent_id`, in the order WordPress lists them."""

        records = await self._fetcher.get(
            Endpoint.MEDIA.value,
            {"parent": int(parent_id), "per_page": ATTACHED_MEDIA_PAGE_SIZE},
        )
        return [descriptor_from_media(media) for media in records if isinstance(media, dict)]

    async def order_content_images(self, content_html: str, parent_id: int) -> list[ImageDescriptor]:
        """Images referenced in `content_html`, in document order.

        1. Same count of `<img>` sources and attached media: sort the
           attached media by appearance.
        2. Otherwise match the content against the media library.
        3. No match at all: the attached media as fetched.
        """

        image_urls = extract_image_urls(content_html)
        attached = await self.attached_images(parent_id)

        if len(image_urls) == len(attached):
            if len(attached) <= 1:
                return attached
            return sort_by_appearance(attached, image_urls)

        try:
            library = await self._library.all_images()
        except Exception as exc:
            logger.warning(
                "Media library unavailable while ordering images of %s: %s",
                parent_id,
                exc,
            )
            return attached

        wanted = {normalize_image_url(url) for url in image_urls}
        matches = [image for image in library if normalize_image_url(image.url) in wanted]
        if not matches:
            return attached

        return sort_by_appearance(matches, image_urls)
