"""Redirect repair for posts whose canonical slug moved.

WordPress can report a post whose `link` points at a different slug than
its own `slug` (the post was turned into, or redirected to, another
resource). The resource behind the link is fetched and returned instead,
keeping what the caller asked for from the original: its categories,
its image and its title.
"""

from __future__ import annotations

import logging
from typing import Any

from adapters.content_parser import slug_from_link
from core.domain.models import Record
from core.fanout import gather_outcomes, outcome_values
from core.interfaces.fetcher import SlugLookup

logger = logging.getLogger(__name__)


def redirect_slug(post: Record) -> str | None:
    """Slug behind the post's link when it differs from the post's own slug."""

    if "slug" not in post or "link" not in post:
        return None
    link_slug = slug_from_link(post.get("link"))
    if not link_slug or post.get("slug") == link_slug:
        return None
    return link_slug


def merge_redirect(original: Record, target: Record) -> Record:
    """`target` with categories, image and rendered title taken from `original`.

    The target never contributes its own categories or image: where the
    original has none, the merged record has none either.
    """

    merged: dict[str, Any] = dict(target)
    for key in ("categories", "image"):
        if key in original:
            merged[key] = original[key]
        else:
            merged.pop(key, None)

    title = original.get("title")
    if isinstance(title, dict) and "rendered" in title:
        target_title = target.get("title")
        base = dict(target_title) if isinstance(target_title, dict) else {}
        merged["title"] = {**base, "rendered": title["rendered"]}
    return merged


def _describe_post(post: Record) -> str:
    slug = post.get("slug") if isinstance(post, dict) else None
    return f"post {slug!r}"


async def resolve_redirects(posts: list[Record], lookup: SlugLookup) -> list[Record]:
    """Resolve every post concurrently; output order matches `posts`.

    A failed or empty lookup keeps the original post.
    """

    async def resolve_one(post: Record) -> Record:
        if not isinstance(post, dict):
            return post
        link_slug = redirect_slug(post)
        if link_slug is None:
            return post

        logger.debug("Post %r links to %r, following", post.get("slug"), link_slug)
        found = await lookup(link_slug)
        if not found:
            logger.warning("Redirect target %r for post %r returned nothing", link_slug, post.get("slug"))
            return post
        return merge_redirect(post, found[0])

    outcomes = await gather_outcomes(
        posts,
        resolve_one,
        lambda post: post,
        operation="resolve_redirects",
        describe=_describe_post,
    )
    return outcome_values(outcomes)
