from __future__ import annotations

import pytest

from adapters.content_parser import (
    extract_caption,
    extract_image_urls,
    link_origin,
    normalize_image_url,
    remove_paragraph_tags,
    slug_from_link,
)


class TestExtractImageUrls:
    def test_document_order_https_only(self):
        html = (
            '<p>intro</p><img class="a" src="https://site/a-300x200.jpg" alt="">'
            '<figure><img src="http://site/insecure.jpg"></figure>'
            '<img src="https://site/b-150x150.png"/><img src="https://site/c.jpg">'
        )
        assert extract_image_urls(html) == [
            "https://site/a-300x200.jpg",
            "https://site/b-150x150.png",
            "https://site/c.jpg",
        ]

    def test_repeated_image_kept_once_at_first_position(self):
        html = '<img src="https://s/x.jpg"><img src="https://s/y.jpg"><img src="https://s/x.jpg">'
        assert extract_image_urls(html) == ["https://s/x.jpg", "https://s/y.jpg"]

    @pytest.mark.parametrize("html", [None, "", "<p>no images</p>", "<img alt='x'>"])
    def test_nothing_to_extract(self, html):
        assert extract_image_urls(html) == []


class TestNormalizeImageUrl:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://site/a-300x200.jpg", "https://site/a"),
            ("https://site/a.jpg", "https://site/a"),
            ("https://site/b-150x150", "https://site/b"),
            ("https://site/photo-2-1024x768.jpeg", "https://site/photo-2"),
        ],
    )
    def test_renditions_share_a_key(self, url, expected):
        assert normalize_image_url(url) == expected


class TestCaption:
    def test_paragraph_tags_and_newlines_removed(self):
        assert remove_paragraph_tags('<p class="x">Hello\n world</p>\n') == "Hello world"

    def test_quoted_source_link_wins_over_caption(self):
        description = (
            '<blockquote class="instagram-media">'
            '<a href="https://www.instagram.com/p/abc/">post</a></blockquote>'
        )
        assert extract_caption("<p>Caption</p>", description) == "https://www.instagram.com/"

    def test_link_outside_blockquote_is_ignored(self):
        description = '<p><a href="https://elsewhere.org/x">x</a></p>'
        assert extract_caption("<p>Caption</p>", description) == "Caption"

    def test_origin_of_bare_host(self):
        assert link_origin("https://example.com") == "https://example.com/"


class TestSlugFromLink:
    @pytest.mark.parametrize(
        "link, expected",
        [
            ("https://site.com/new-slug/", "new-slug"),
            ("https://site.com/new-slug/child/", "new-slug"),
            ("https://site.com/", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_first_path_segment(self, link, expected):
        assert slug_from_link(link) == expected
