from __future__ import annotations

import logging

import pytest

from adapters.redirect_resolver import merge_redirect, redirect_slug, resolve_redirects
from core.errors import NotFoundError


class Lookup:
    def __init__(self, results: dict[str, list[dict]] | None = None, *, error: Exception | None = None) -> None:
        self.results = results or {}
        self.error = error
        self.slugs: list[str] = []

    async def __call__(self, slug: str) -> list[dict]:
        self.slugs.append(slug)
        if self.error is not None:
            raise self.error
        return self.results.get(slug, [])


def post(slug: str, link_slug: str, **extra) -> dict:
    return {
        "id": extra.pop("id", 1),
        "slug": slug,
        "link": f"https://site.com/{link_slug}/",
        "title": {"rendered": extra.pop("title", slug.title())},
        **extra,
    }


@pytest.mark.asyncio
async def test_moved_post_takes_target_with_original_categories():
    original = post("old", "new", categories=[3, 9], image={"id": 5, "url": "https://site.com/i.jpg"})
    target = {"id": 77, "slug": "new", "categories": [1], "title": {"rendered": "Target"}, "content": {"rendered": "x"}}
    lookup = Lookup({"new": [target]})

    [resolved] = await resolve_redirects([original], lookup)

    assert lookup.slugs == ["new"]
    assert resolved["id"] == 77
    assert resolved["content"] == {"rendered": "x"}
    assert resolved["categories"] == [3, 9]
    assert resolved["image"] == {"id": 5, "url": "https://site.com/i.jpg"}
    assert resolved["title"]["rendered"] == "Old"


@pytest.mark.asyncio
async def test_empty_lookup_returns_original_unmodified():
    original = post("old", "new", categories=[3])

    [resolved] = await resolve_redirects([original], Lookup())

    assert resolved == original


@pytest.mark.asyncio
async def test_failed_lookup_degrades_to_original():
    original = post("old", "new")

    [resolved] = await resolve_redirects([original], Lookup(error=NotFoundError("pages", "new")))

    assert resolved is original


@pytest.mark.asyncio
async def test_batch_order_preserved_and_siblings_unaffected():
    posts = [
        post("a", "a", id=1),
        post("b-old", "b", id=2),
        post("c-old", "c", id=3),
        post("d", "d", id=4),
    ]
    lookup = Lookup({"b": [{"id": 20, "slug": "b"}]})

    resolved = await resolve_redirects(posts, lookup)

    assert [p["id"] for p in resolved] == [1, 20, 3, 4]
    assert sorted(lookup.slugs) == ["b", "c"]


@pytest.mark.asyncio
async def test_posts_without_slug_or_link_are_not_followed():
    lookup = Lookup()
    posts = [{"id": 1, "title": {"rendered": "T"}}, {"id": 2, "slug": "x"}]

    assert await resolve_redirects(posts, lookup) == posts
    assert lookup.slugs == []


def test_redirect_slug_matching_link():
    assert redirect_slug(post("same", "same")) is None
    assert redirect_slug(post("old", "new")) == "new"
    assert redirect_slug({"slug": "x", "link": "https://site.com/"}) is None


def test_merge_keeps_target_title_fields_but_original_rendered():
    merged = merge_redirect(
        {"title": {"rendered": "Mine"}},
        {"title": {"rendered": "Theirs", "raw": "theirs"}, "categories": [1]},
    )
    assert merged["title"] == {"rendered": "Mine", "raw": "theirs"}
    assert "categories" not in merged


@pytest.mark.asyncio
async def test_target_image_dropped_when_original_has_none():
    original = post("old", "new", id=1, categories=[3])
    target = {
        "id": 9,
        "slug": "new",
        "title": {"rendered": "New"},
        "categories": [8],
        "image": {"id": 77, "url": "target.jpg"},
    }

    [resolved] = await resolve_redirects([original], Lookup({"new": [target]}))

    assert resolved == {"id": 9, "slug": "new", "title": {"rendered": "Old"}, "categories": [3]}
    assert "image" in target


@pytest.mark.asyncio
async def test_degraded_lookup_is_logged_with_the_post_slug(caplog):
    original = post("old-slug", "new")

    with caplog.at_level(logging.WARNING, logger="core.fanout"):
        await resolve_redirects([original], Lookup(error=NotFoundError("pages", "new")))

    assert "resolve_redirects: degraded post 'old-slug'" in caplog.text
