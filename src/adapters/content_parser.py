"""Helpers for rendered WordPress HTML and URLs.

Pure functions (no I/O) used by the enrichment and redirect adapters:
- `extract_image_urls`: `<img src>` values in document order.
- `normalize_image_url`: comparison key shared by every size rendition.
- `extract_caption`: caption text, or the origin of a quoted source link.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

_PARAGRAPH_TAG_RE = re.compile(r"</?p[^>]*>")
# "-300x200.jpg" / "-150x150" at the end of a URL.
_DIMENSION_SUFFIX_RE = re.compile(r"-\d+x\d+(\.\w+)?$")
_EXTENSION_RE = re.compile(r"\.\w+$")


def remove_paragraph_tags(text: str | None) -> str:
    """Strip `<p>`/`</p>` tags and newlines, then trim."""

    if not text:
        return ""
    cleaned = _PARAGRAPH_TAG_RE.sub("", text).replace("\n", "")
    return cleaned.strip()


def extract_image_urls(html: str | None) -> list[str]:
    """`https://` sources of every `<img>`, first appearance order, no repeats."""

    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    seen: set[str] = set()
    urls: list[str] = []
    for img in soup.find_all("img"):
        src = img.get("src")
        if not isinstance(src, str) or not src.startswith("https://"):
            continue
        if src in seen:
            continue
        seen.add(src)
        urls.append(src)
    return urls


def normalize_image_url(url: str) -> str:
    """Drop the `-WxH` rendition suffix and the file extension."""

    return _EXTENSION_RE.sub("", _DIMENSION_SUFFIX_RE.sub("", url or ""))


def link_origin(url: str) -> str:
    """`https://host/` for any absolute URL."""

    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}/"


def extract_quoted_link(description_html: str | None) -> str | None:
    """First `http(s)` href inside a `<blockquote>` of the description."""

    if not description_html:
        return None

    soup = BeautifulSoup(description_html, "html.parser")
    for quote in soup.find_all("blockquote"):
        for anchor in quote.find_all("a", href=True):
            href = str(anchor.get("href") or "").strip()
            if href.startswith("http"):
                return href
    return None


def extract_caption(caption_html: str | None, description_html: str | None = None) -> str:
    """Caption for an image descriptor.

    A source quoted in the media description (blockquote + link, the
    usual embed credit) wins over the caption text and is reduced to its
    origin.
    """

    quoted = extract_quoted_link(description_html)
    if quoted:
        return link_origin(quoted)
    return remove_paragraph_tags(caption_html)


def slug_from_link(link: str | None) -> str:
    """First path segment of a permalink ('' when there is none)."""

    if not link:
        return ""
    segments = urlsplit(str(link)).path.split("/")
    return segments[1] if len(segments) > 1 else ""
